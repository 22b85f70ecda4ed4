"""Request bodies accepted by the JSON API.

Fields are optional at the schema level so that missing values reach the
services and come back as 400 responses with a specific message.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LoginRequest(_Body):
    username: str | None = None
    password: str | None = None


class UploadUrlRequest(_Body):
    filename: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")


class ProcessUploadRequest(_Body):
    # NaN and Infinity would be written into the index as bare tokens
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    key: str | None = None
    title: str | None = None
    description: str | None = None
    category: str | None = None
    initial_yaw: float | None = Field(default=None, alias="initialYaw")
    initial_pitch: float | None = Field(default=None, alias="initialPitch")
    initial_hfov: float | None = Field(default=None, alias="initialHfov")


class VideoRequest(_Body):
    url: str | None = None
    title: str | None = None
    description: str | None = None


class TourRequest(_Body):
    title: str | None = None
    iframe_url: str | None = Field(default=None, alias="iframeUrl")
    description: str | None = None
    slug: str | None = None
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")
