from pydantic import BaseModel, Field, field_validator
from typing import Optional
from enum import Enum


class ServiceStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"


class SaveResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Текст ошибки")


class HealthCheck(BaseModel):
    status: ServiceStatus
    service: str
    version: str
    timestamp: float
    uptime_seconds: float = Field(0.0, ge=0)
    data_file: str
    data_file_exists: bool = False
    backups: int = Field(0, ge=0)
    last_backup: Optional[str] = None

    @field_validator('service')
    @classmethod
    def validate_service(cls, v):
        if not v.strip():
            raise ValueError('service не может быть пустым')
        return v
