"""Shared data models for image-variants."""

import os
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from PIL import ImageColor
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

Color = Union[str, Tuple[int, ...]]

DEFAULT_NAME_TEMPLATE = "${name}"
DEFAULT_COLOR_PAD = "white"
DEFAULT_RESIZE_LIMIT = 8


def normalize_color(value: Any) -> Optional[Color]:
    """Validate a padding color: a Pillow color string or an RGB(A) sequence."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        ImageColor.getrgb(value)  # raises ValueError for unknown colors
        return value
    if isinstance(value, (list, tuple)):
        channels = tuple(value)
        if len(channels) not in (3, 4) or not all(
            isinstance(c, int) and 0 <= c <= 255 for c in channels
        ):
            raise ValueError(f"Color must have 3 or 4 channels in 0..255: {value!r}")
        return channels
    raise ValueError(f"Unsupported color value: {value!r}")


class SourceImage(BaseModel):
    """The image every variant of a batch is derived from."""

    content: Optional[bytes] = None
    path: Optional[str] = None
    mimetype: Optional[str] = None
    filename: Optional[str] = None

    @classmethod
    def from_path(cls, path: str) -> "SourceImage":
        return cls(path=path)

    @classmethod
    def from_bytes(
        cls, data: bytes, mimetype: Optional[str] = None, filename: Optional[str] = None
    ) -> "SourceImage":
        return cls(content=data, mimetype=mimetype, filename=filename)

    @property
    def image_type(self) -> Optional[str]:
        """Type tag from the mimetype, or from the file extension of a path source."""
        if self.mimetype:
            return self.mimetype.replace("image/", "") or None
        name = self.path if self.content is None and self.path else self.filename
        if not name:
            return None
        extension = os.path.splitext(os.path.basename(name))[1]
        return extension[1:] or None

    def load_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path:
            with open(self.path, "rb") as fh:
                return fh.read()
        raise ValueError("Source image has neither content nor path")


class AdaptKind(str, Enum):
    """How a cropped variant is padded before cropping."""

    NONE = "none"
    SQUARE = "square"
    EXPLICIT = "explicit"


class AdaptPolicy(BaseModel):
    """Resolved form of the ``adapt`` option (bool, int or {width, height})."""

    kind: AdaptKind = AdaptKind.NONE
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)

    @property
    def enabled(self) -> bool:
        return self.kind is not AdaptKind.NONE

    def box(self) -> Tuple[int, int]:
        if not self.enabled or self.width is None or self.height is None:
            raise ValueError("Adapt policy has no padding box")
        return self.width, self.height

    @classmethod
    def square(cls, size: int) -> "AdaptPolicy":
        return cls(kind=AdaptKind.SQUARE, width=size, height=size)

    @classmethod
    def explicit(cls, width: int, height: int) -> "AdaptPolicy":
        return cls(kind=AdaptKind.EXPLICIT, width=width, height=height)


class VariantSpec(BaseModel):
    """One output variant.

    Field aliases follow the JSON configuration format (``width``,
    ``height``, ``top``, ``left``, ``format``, ``omitExtension``,
    ``colorPad``). Unknown keys are kept so that filename templates can use
    them.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    key: Optional[str] = None
    name_template: Optional[str] = Field(default=None, alias="format")
    target_width: Optional[int] = Field(default=None, alias="width")
    target_height: Optional[int] = Field(default=None, alias="height")
    crop_top: int = Field(default=0, alias="top")
    crop_left: int = Field(default=0, alias="left")
    crop: bool = False
    adapt: AdaptPolicy = Field(default_factory=AdaptPolicy)
    omit_extension: Optional[bool] = Field(default=None, alias="omitExtension")
    color_pad: Optional[Color] = Field(default=None, alias="colorPad")

    @model_validator(mode="before")
    @classmethod
    def _default_key(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and not data.get("key"):
            data = dict(data)
            data["key"] = data.get("name")
        return data

    @field_validator("target_width", "target_height", "name_template", mode="before")
    @classmethod
    def _falsy_to_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("crop_top", "crop_left", mode="before")
    @classmethod
    def _falsy_to_zero(cls, value: Any) -> Any:
        return value or 0

    @field_validator("color_pad", mode="before")
    @classmethod
    def _check_color(cls, value: Any) -> Optional[Color]:
        return normalize_color(value)

    @field_validator("adapt", mode="before")
    @classmethod
    def _resolve_adapt(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, AdaptPolicy):
            return value
        if value is None or value is False:
            return AdaptPolicy()
        if value is True:
            size = max(info.data.get("target_width") or 0, info.data.get("target_height") or 0)
            # Without target dimensions there is nothing to pad: pass through
            return AdaptPolicy.square(size) if size else AdaptPolicy()
        if isinstance(value, int):
            if value < 0:
                raise ValueError(f"adapt size must be positive: {value}")
            return AdaptPolicy.square(value) if value else AdaptPolicy()
        if isinstance(value, Mapping):
            if "kind" in value:
                return AdaptPolicy.model_validate(value)
            if value.get("width") and value.get("height"):
                return AdaptPolicy.explicit(value["width"], value["height"])
        raise ValueError(f"Unsupported adapt value: {value!r}")

    def template_context(self) -> Dict[str, Any]:
        """Fields exposed to filename templates, by attribute name and config key."""
        context = self.model_dump(exclude={"adapt"})
        context.update(self.model_dump(by_alias=True, exclude={"adapt"}))
        context["adapt"] = self.adapt.kind.value
        return context


class BatchSpec(BaseModel):
    """Configuration of one batch: naming defaults plus the variants."""

    model_config = ConfigDict(populate_by_name=True)

    name_template: str = Field(default=DEFAULT_NAME_TEMPLATE, alias="format")
    omit_extension: bool = Field(default=False, alias="omitExtension")
    color_pad: Optional[Color] = Field(default=None, alias="colorPad")
    variants: List[VariantSpec] = Field(default_factory=list, alias="files")

    @field_validator("name_template", mode="before")
    @classmethod
    def _default_template(cls, value: Any) -> Any:
        return value or DEFAULT_NAME_TEMPLATE

    @field_validator("omit_extension", mode="before")
    @classmethod
    def _default_omit(cls, value: Any) -> Any:
        return bool(value)

    @field_validator("color_pad", mode="before")
    @classmethod
    def _check_color(cls, value: Any) -> Optional[Color]:
        return normalize_color(value)


class Dimensions(BaseModel):
    """Planned output size of a resize pass."""

    width: int
    height: int


class CropOffsets(BaseModel):
    """Top-left corner of a crop box."""

    top: int
    left: int


class VariantResult(BaseModel):
    """Where one uploaded variant ended up."""

    url: str
    filename: str


BatchResult = Dict[str, VariantResult]

ProcessorName = Literal["serial", "multithread", "asyncio"]

ENV_VARS = {
    "static_url": "IMAGE_VARIANTS_STATIC_URL",
    "resize_limit": "IMAGE_VARIANTS_RESIZE_LIMIT",
    "bucket": "IMAGE_VARIANTS_BUCKET",
    "prefix": "IMAGE_VARIANTS_PREFIX",
    "endpoint_url": "IMAGE_VARIANTS_ENDPOINT_URL",
    "region": "IMAGE_VARIANTS_REGION",
    "processor": "IMAGE_VARIANTS_PROCESSOR",
}


class UploaderConfig(BaseModel):
    """Configuration of an uploader instance."""

    static_url: str = ""
    resize_limit: int = Field(default=DEFAULT_RESIZE_LIMIT, ge=1)
    bucket: Optional[str] = None
    prefix: str = ""
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    processor: ProcessorName = "multithread"
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> "UploaderConfig":
        """Build a config from IMAGE_VARIANTS_* variables; non-None overrides win."""
        values: Dict[str, Any] = {}
        for field_name, env_var in ENV_VARS.items():
            env_value = os.getenv(env_var)
            if env_value:
                values[field_name] = env_value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
