from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from typing import Any, List
from contextlib import asynccontextmanager

from config import ServiceConfig, configure_logging
from algorithms.exceptions import (
    EmptyQueueError,
    InvalidPriorityError,
    NotFoundError,
    PriorityQueueError,
)
from storage.queue_registry import QueueRegistry

_logger = logger.bind(name="main")


class EnqueueRequest(BaseModel):
    value: Any
    priority: float


class DecreaseKeyRequest(BaseModel):
    value: Any
    priority: float


class ValueRequest(BaseModel):
    value: Any


class QueueStatusResponse(BaseModel):
    name: str
    size: int
    capacity: int


class DequeueResponse(BaseModel):
    value: Any


class PriorityResponse(BaseModel):
    value: Any
    priority: float


class ContainsResponse(BaseModel):
    value: Any
    contains: bool


class AgingResponse(BaseModel):
    name: str
    promoted: int


class QueueListResponse(BaseModel):
    queues: List[str]


ERROR_STATUS = {
    EmptyQueueError: 409,
    NotFoundError: 404,
    InvalidPriorityError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = ServiceConfig.from_env()
    configure_logging(config.log_level)
    app.state.config = config
    app.state.registry = QueueRegistry(initial_capacity=config.initial_capacity)
    _logger.info(f"Starting {config.service_name} (initial capacity {config.initial_capacity})")

    yield

    app.state.registry.clear_all()
    _logger.info(f"Stopped {config.service_name}")


app = FastAPI(title="Priority Scheduler", lifespan=lifespan)


def get_registry(request: Request) -> QueueRegistry:
    return request.app.state.registry


def get_config(request: Request) -> ServiceConfig:
    return request.app.state.config


@app.exception_handler(PriorityQueueError)
async def priority_queue_error_handler(request: Request, exc: PriorityQueueError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        400
    )
    if isinstance(exc, InvalidPriorityError):
        _logger.warning(f"Rejected {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "detail": str(exc)}
    )


@app.post("/v1/queues/{name}/enqueue", response_model=QueueStatusResponse)
async def enqueue(name: str, request: EnqueueRequest,
                  registry: QueueRegistry = Depends(get_registry)):
    status = await registry.enqueue(name, request.value, request.priority)
    return QueueStatusResponse(**status)


@app.post("/v1/queues/{name}/dequeue", response_model=DequeueResponse)
async def dequeue(name: str, registry: QueueRegistry = Depends(get_registry)):
    value = await registry.dequeue(name)
    return DequeueResponse(value=value)


@app.get("/v1/queues/{name}/peek", response_model=PriorityResponse)
async def peek(name: str, registry: QueueRegistry = Depends(get_registry)):
    value, priority = await registry.peek(name)
    return PriorityResponse(value=value, priority=priority)


@app.post("/v1/queues/{name}/decrease-key", response_model=PriorityResponse)
async def decrease_key(name: str, request: DecreaseKeyRequest,
                       registry: QueueRegistry = Depends(get_registry)):
    await registry.decrease_key(name, request.value, request.priority)
    return PriorityResponse(value=request.value, priority=request.priority)


@app.post("/v1/queues/{name}/priority", response_model=PriorityResponse)
async def get_priority(name: str, request: ValueRequest,
                       registry: QueueRegistry = Depends(get_registry)):
    priority = await registry.get_priority(name, request.value)
    return PriorityResponse(value=request.value, priority=priority)


@app.post("/v1/queues/{name}/contains", response_model=ContainsResponse)
async def contains(name: str, request: ValueRequest,
                   registry: QueueRegistry = Depends(get_registry)):
    found = await registry.contains(name, request.value)
    return ContainsResponse(value=request.value, contains=found)


@app.post("/v1/queues/{name}/age", response_model=AgingResponse)
async def age(name: str, registry: QueueRegistry = Depends(get_registry),
              config: ServiceConfig = Depends(get_config)):
    promoted = await registry.age(
        name,
        threshold=config.aging_threshold,
        step=config.aging_step,
        floor=config.aging_floor
    )
    return AgingResponse(name=name, promoted=promoted)


@app.get("/v1/queues/{name}", response_model=QueueStatusResponse)
async def get_queue_status(name: str, registry: QueueRegistry = Depends(get_registry)):
    return QueueStatusResponse(**await registry.status(name))


@app.delete("/v1/queues/{name}")
async def drop_queue(name: str, registry: QueueRegistry = Depends(get_registry)):
    if not registry.drop(name):
        raise NotFoundError(f"queue '{name}' does not exist")
    return {"status": "dropped", "name": name}


@app.get("/v1/queues", response_model=QueueListResponse)
async def list_queues(registry: QueueRegistry = Depends(get_registry)):
    return QueueListResponse(queues=registry.names())


@app.get("/health")
async def health():
    return {"status": "healthy"}
