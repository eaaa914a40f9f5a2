"""Filename templating for uploaded variants."""

from string import Template
from typing import Any, Callable, Mapping

from .exceptions import ConfigurationError
from .models import BatchSpec, VariantSpec

CompiledTemplate = Callable[[Mapping[str, Any]], str]


def compile_template(template: str) -> CompiledTemplate:
    """
    Compile a ``${field}`` template into a render function.

    Args:
        template: Template string, e.g. ``"avatar-${name}-${id}"``

    Returns:
        Function rendering the template against a mapping of fields

    Raises:
        ConfigurationError: At render time, if the template references an
            unknown field or contains a malformed placeholder
    """
    compiled = Template(template)

    def render(context: Mapping[str, Any]) -> str:
        try:
            return compiled.substitute(context)
        except KeyError as exc:
            raise ConfigurationError(
                f"Filename template {template!r} references unknown field {exc.args[0]!r}"
            ) from exc
        except ValueError as exc:
            raise ConfigurationError(f"Invalid filename template {template!r}: {exc}") from exc

    return render


def build_filename(
    spec: VariantSpec,
    batch: BatchSpec,
    image_type: str,
    templater: Callable[[str], CompiledTemplate] = compile_template,
) -> str:
    """Render the variant's filename, appending ``.<type>`` unless omitted."""
    render = templater(spec.name_template or batch.name_template)
    filename = render(spec.template_context())

    # An explicit per-variant value, even False, wins over the batch default
    if spec.omit_extension is None:
        omit_extension = batch.omit_extension
    else:
        omit_extension = spec.omit_extension
    if omit_extension:
        return filename
    return f"{filename}.{image_type}"
