"""Decoding helpers for polymorphic (tagged-union) API objects.

pydantic resolves discriminated unions on its own; this module only makes
the failure mode explicit.  An unknown or missing discriminator becomes an
:class:`~sdk.exceptions.UnknownVariantError` instead of a generic
validation error, wherever the union sits in the payload.
"""

from __future__ import annotations

from typing import Any, Dict, List, get_args

from pydantic import TypeAdapter, ValidationError

from sdk.exceptions import UnknownVariantError

_TAG_ERRORS = ("union_tag_invalid", "union_tag_not_found")

_adapters: Dict[Any, TypeAdapter[Any]] = {}


def adapter_for(tp: Any) -> TypeAdapter[Any]:
    """Return a :class:`TypeAdapter` for *tp*, cached when *tp* is hashable."""
    try:
        return _adapters[tp]
    except KeyError:
        adapter = TypeAdapter(tp)
        _adapters[tp] = adapter
        return adapter
    except TypeError:
        return TypeAdapter(tp)


def raise_unknown_variant(exc: ValidationError) -> None:
    """Re-raise *exc* as :class:`UnknownVariantError` if a union tag was rejected."""
    for error in exc.errors():
        if error["type"] not in _TAG_ERRORS:
            continue
        ctx = error.get("ctx") or {}
        discriminator = str(ctx.get("discriminator", "?")).strip("'")
        tag = ctx.get("tag") if error["type"] == "union_tag_invalid" else None
        raise UnknownVariantError(discriminator, tag, ctx.get("expected_tags")) from exc


def parse_as(tp: Any, data: Any) -> Any:
    """Validate *data* (decoded JSON) as *tp*.

    Raises:
        UnknownVariantError: A discriminator selected no known variant.
        pydantic.ValidationError: Any other shape mismatch.
    """
    try:
        return adapter_for(tp).validate_python(data)
    except ValidationError as exc:
        raise_unknown_variant(exc)
        raise


def variant_tags(union: Any) -> List[str]:
    """List the discriminator values accepted by an ``Annotated`` union alias."""
    members, field_info = get_args(union)
    name = field_info.discriminator
    return [variant.model_fields[name].default for variant in get_args(members)]
