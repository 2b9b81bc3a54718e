"""
Storage identifiers.

Defaults storages are addressed as ``{entity_type}.{bundle}.{view_mode}``,
overrides storages as ``{entity_type}.{entity_id}``. These strings are
persisted (tempstore keys, display IDs), so the format is fixed.
"""

from typing import NamedTuple

from services.section_storage.exceptions import InvalidStorageIdError

DELIMITER = "."


class DisplayStorageKey(NamedTuple):
    entity_type_id: str
    bundle: str
    view_mode: str

    def encode(self) -> str:
        return encode_display_id(self.entity_type_id, self.bundle, self.view_mode)


class EntityStorageKey(NamedTuple):
    entity_type_id: str
    entity_id: str

    def encode(self) -> str:
        return encode_entity_id(self.entity_type_id, self.entity_id)


def is_storage_id(value) -> bool:
    return isinstance(value, str) and DELIMITER in value


def encode_display_id(entity_type_id, bundle, view_mode) -> str | None:
    if not (entity_type_id and bundle and view_mode):
        return None
    return DELIMITER.join((str(entity_type_id), str(bundle), str(view_mode)))


def decode_display_id(storage_id: str, storage_type: str = "defaults") -> DisplayStorageKey:
    # View mode names may contain the delimiter, so only the first two split
    parts = storage_id.split(DELIMITER, 2) if isinstance(storage_id, str) else []
    if len(parts) != 3 or not all(parts):
        raise InvalidStorageIdError(storage_id, storage_type)
    return DisplayStorageKey(*parts)


def encode_entity_id(entity_type_id, entity_id) -> str | None:
    if not entity_type_id or entity_id in (None, ""):
        return None
    return f"{entity_type_id}{DELIMITER}{entity_id}"


def decode_entity_id(storage_id: str, storage_type: str = "overrides") -> EntityStorageKey:
    parts = storage_id.split(DELIMITER, 1) if isinstance(storage_id, str) else []
    if len(parts) != 2 or not all(parts):
        raise InvalidStorageIdError(storage_id, storage_type)
    return EntityStorageKey(*parts)
