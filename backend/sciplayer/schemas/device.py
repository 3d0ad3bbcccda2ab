"""Device Schemas: registration request and response.

Invariants:
    - DeviceCreate.device_id is stripped and non-empty
    - JSON field names are camelCase (deviceId); Python attributes are snake_case
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeviceCreate(BaseModel):
    """Device registration body: {"deviceId": "..."}."""
    model_config = ConfigDict(populate_by_name=True)

    device_id: str = Field(alias="deviceId")

    @field_validator("device_id")
    @classmethod
    def strip_device_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("deviceId is required")
        return v


class DeviceResponse(BaseModel):
    """Registration outcome; created is False when the device already existed."""
    model_config = ConfigDict(populate_by_name=True)

    device_id: str = Field(alias="deviceId")
    created: bool
