"""Per-variant pipeline: decode, plan, transform, encode, name, upload."""

import asyncio
import inspect
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Tuple

from PIL import Image

from .codec import PillowCodec
from .error_handling import with_async_error_handling, with_error_handling
from .exceptions import (
    DecodeError,
    ImageProcessingError,
    PipelineError,
    StorageError,
    UnknownTypeError,
)
from .geometry import (
    plan_centered_crop_offsets,
    plan_contain_no_upscale,
    plan_cover,
    plan_height_max,
    plan_width_max,
)
from .models import (
    DEFAULT_COLOR_PAD,
    BatchSpec,
    Dimensions,
    SourceImage,
    VariantResult,
    VariantSpec,
)
from .naming import CompiledTemplate, build_filename, compile_template
from .observability import LogContext, StructuredLogger
from .protocols import (
    CodecProtocol,
    ImageHandleProtocol,
    LoggerProtocol,
    StorageClientProtocol,
    TransformBatchProtocol,
)


@dataclass
class RenderedVariant:
    """An encoded variant waiting to be uploaded."""

    key: str
    filename: str
    data: bytes


@contextmanager
def variant_errors(key: str) -> Iterator[None]:
    """Attach the variant key to pipeline errors raised inside the block."""
    try:
        yield
    except PipelineError as exc:
        if exc.key is None:
            exc.key = key
        raise


class VariantPipeline:
    """Produces and uploads one variant of a source image."""

    def __init__(
        self,
        codec: Optional[CodecProtocol] = None,
        storage: Optional[StorageClientProtocol] = None,
        static_url: str = "",
        templater: Callable[[str], CompiledTemplate] = compile_template,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._codec = codec or PillowCodec()
        self._storage = storage
        self._static_url = static_url
        self._templater = templater
        self._logger = logger or StructuredLogger("image-variants.pipeline")

    @property
    def storage(self) -> Optional[StorageClientProtocol]:
        return self._storage

    def render(self, source: SourceImage, batch: BatchSpec, spec: VariantSpec) -> RenderedVariant:
        """Decode the source, apply the variant geometry, encode, and name it."""
        key = spec.key or spec.name
        image_type = source.image_type
        log_context = LogContext(
            operation="render_variant", component="variant_pipeline"
        ).with_metadata(key=key)

        with variant_errors(key):
            if not image_type:
                raise UnknownTypeError("Image doesn't have any type (jpg, png, etc.)!")

            self._logger.debug("Decoding source image", log_context)
            handle = self._decode(source, image_type)

            image_batch = handle.batch()
            self._plan(handle, image_batch, batch, spec)
            self._logger.debug(
                "Planned transformations",
                log_context.with_operation("plan_geometry"),
                source_size=f"{handle.width}x{handle.height}",
                operations=getattr(image_batch, "operations", []),
            )
            image = self._transform(image_batch)

            self._logger.debug("Encoding variant", log_context.with_operation("encode_variant"))
            data = self._codec.encode(image, image_type)
            filename = build_filename(spec, batch, image_type, self._templater)

        return RenderedVariant(key=key, filename=filename, data=data)

    def run_variant(
        self, source: SourceImage, batch: BatchSpec, spec: VariantSpec
    ) -> Tuple[str, VariantResult]:
        """Render and upload one variant; returns ``(key, result)``."""
        start_time = time.time()
        rendered = self.render(source, batch, spec)
        with variant_errors(rendered.key):
            path = self._upload(rendered)
        return rendered.key, self._result(rendered, path, start_time)

    async def run_variant_async(
        self, source: SourceImage, batch: BatchSpec, spec: VariantSpec
    ) -> Tuple[str, VariantResult]:
        """Coroutine flavour of :meth:`run_variant`.

        Rendering runs in a worker thread. The upload is awaited directly
        when the storage client is asynchronous.
        """
        start_time = time.time()
        rendered = await asyncio.to_thread(self.render, source, batch, spec)
        with variant_errors(rendered.key):
            if inspect.iscoroutinefunction(getattr(self._storage, "upload_buffer", None)):
                path = await self._upload_async(rendered)
            else:
                path = await asyncio.to_thread(self._upload, rendered)
        return rendered.key, self._result(rendered, path, start_time)

    @with_error_handling(DecodeError, "decode source image")
    def _decode(self, source: SourceImage, image_type: str) -> ImageHandleProtocol:
        return self._codec.decode(source.load_bytes(), image_type)

    @with_error_handling(ImageProcessingError, "transform image")
    def _transform(self, image_batch: TransformBatchProtocol) -> Image.Image:
        return image_batch.apply()

    def _plan(
        self,
        handle: ImageHandleProtocol,
        image_batch: TransformBatchProtocol,
        batch: BatchSpec,
        spec: VariantSpec,
    ) -> None:
        width, height = spec.target_width, spec.target_height

        # Neither dimension: upload the image as is
        if not (width or height):
            return

        canvas: Dimensions
        if width and height:
            if spec.crop and spec.adapt.enabled:
                box_w, box_h = spec.adapt.box()
                color = spec.color_pad or batch.color_pad or DEFAULT_COLOR_PAD
                image_batch.contain(box_w, box_h, color)
                canvas = Dimensions(width=box_w, height=box_h)
            elif spec.crop:
                canvas = plan_cover(handle.width, handle.height, width, height)
                image_batch.resize(canvas.width, canvas.height)
            else:
                canvas = plan_contain_no_upscale(handle.width, handle.height, width, height)
                image_batch.resize(canvas.width, canvas.height)
        elif width:
            canvas = plan_width_max(handle.width, handle.height, width)
            image_batch.resize(canvas.width, canvas.height)
        else:
            canvas = plan_height_max(handle.width, handle.height, height)
            image_batch.resize(canvas.width, canvas.height)

        if spec.crop:
            crop_w = width or canvas.width
            crop_h = height or canvas.height
            offsets = plan_centered_crop_offsets(
                canvas.width, canvas.height, crop_w, crop_h, spec.crop_top, spec.crop_left
            )
            image_batch.crop(offsets.left, offsets.top, offsets.left + crop_w, offsets.top + crop_h)

    @with_error_handling(StorageError, "upload variant")
    def _upload(self, rendered: RenderedVariant) -> str:
        if self._storage is None:
            raise StorageError("No storage client configured")
        return self._storage.upload_buffer(rendered.data, rendered.filename)

    @with_async_error_handling(StorageError, "upload variant")
    async def _upload_async(self, rendered: RenderedVariant) -> str:
        return await self._storage.upload_buffer(rendered.data, rendered.filename)  # type: ignore[union-attr,misc]

    def _result(self, rendered: RenderedVariant, path: str, start_time: float) -> VariantResult:
        result = VariantResult(url=f"{self._static_url}{path}", filename=rendered.filename)
        self._logger.info(
            "Uploaded variant",
            LogContext(operation="upload_variant", component="variant_pipeline"),
            key=rendered.key,
            filename=rendered.filename,
            processing_time_ms=round((time.time() - start_time) * 1000, 1),
        )
        return result
