"""
Profile merger - folds a section patch into a ProfileDocument.
"""
import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..schemas.profile import LIST_SECTIONS, SECTION_NAMES, ProfileDocument

logger = logging.getLogger(__name__)


def _section_patch(section: str, value: Any) -> Dict[str, Any]:
    # A bare list stands for the section's entries
    if isinstance(value, list) and section in LIST_SECTIONS:
        return {"entries": value}
    if isinstance(value, dict):
        return value
    return {}


def merge(document: ProfileDocument, patch: Dict[str, Any], skip_invalid: bool = True) -> ProfileDocument:
    """
    Return a new document where every recognized section in `patch` is
    shallow-merged over the existing section. Sections missing from the
    patch come through unchanged; unrecognized keys are ignored. A section
    whose merged values do not validate is left as it was, or raises
    ValidationError when `skip_invalid` is False. Neither argument is mutated.
    """
    merged = document.model_copy(deep=True)
    if not isinstance(patch, dict):
        return merged

    for key, value in patch.items():
        section = SECTION_NAMES.get(key)
        if section is None:
            logger.debug(f"[Merge] Ignoring unknown section '{key}'")
            continue

        section_patch = _section_patch(section, value)
        if not section_patch:
            continue

        current = getattr(merged, section)
        model_cls = type(current)
        updates = model_cls.canonical_keys(section_patch)
        if not updates:
            continue
        try:
            value = model_cls.model_validate({**current.model_dump(), **updates})
        except ValidationError as e:
            if not skip_invalid:
                raise
            logger.warning(f"[Merge] Skipping section '{section}', patch does not fit: {e.error_count()} errors")
            continue
        setattr(merged, section, value)

    return merged
