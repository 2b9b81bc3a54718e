"""Section list behaviour shared by the records that own layout sections"""

from typing import Any

from schemas.section import Section


class SectionOutOfBoundsError(IndexError):
    pass


class SectionListMixin:
    """
    Ordered list operations over ``get_sections()``.

    Implementers provide ``get_sections()``, returning the live list, and
    ``_set_sections()``, which replaces it. The mixins are combined with
    declarative models, which cannot also take ABCMeta, so missing hooks
    surface as NotImplementedError on first use.
    """

    def get_sections(self) -> list[Section]:
        raise NotImplementedError(f"{type(self).__name__} must implement get_sections()")

    def _set_sections(self, sections: list[Section]) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement _set_sections()")

    def count(self) -> int:
        return len(self.get_sections())

    def has_section(self, delta: int) -> bool:
        return 0 <= delta < self.count()

    def get_section(self, delta: int) -> Section:
        if not self.has_section(delta):
            raise SectionOutOfBoundsError(f"Invalid delta {delta}")
        return self.get_sections()[delta]

    def append_section(self, section: Section):
        sections = self.get_sections()
        sections.append(section)
        self._set_sections(sections)
        return self

    def insert_section(self, delta: int, section: Section):
        if self.has_section(delta):
            sections = self.get_sections()
            sections.insert(delta, section)
            self._set_sections(sections)
            return self
        return self.append_section(section)

    def remove_section(self, delta: int):
        if not self.has_section(delta):
            raise SectionOutOfBoundsError(f"Invalid delta {delta}")
        sections = self.get_sections()
        del sections[delta]
        self._set_sections(sections)
        return self

    def remove_all_sections(self, set_blank: bool = False):
        self._set_sections([])
        if set_blank:
            self._set_sections([Section(layout_id="layout_builder_blank")])
        return self


class SerializedSectionsMixin:
    """
    Caches Section objects built from a JSON column.

    The cache is the record's layout: edits change it in memory only, and
    ``flush_sections()`` writes it back to the column right before a save.
    Committing the session for other reasons leaves the stored layout alone.

    Implementers provide ``_read_section_data()`` and ``_write_section_data()``
    for the column holding the serialized sections.
    """

    _section_objects = None

    def _read_section_data(self) -> list[dict[str, Any]]:
        raise NotImplementedError(f"{type(self).__name__} must implement _read_section_data()")

    def _write_section_data(self, data: list[dict[str, Any]]) -> None:
        raise NotImplementedError(f"{type(self).__name__} must implement _write_section_data()")

    def _cached_sections(self) -> list[Section]:
        if self._section_objects is None:
            self._section_objects = [Section.from_array(item) for item in self._read_section_data() or []]
        return self._section_objects

    def _replace_sections(self, sections: list[Section]) -> None:
        # Keep the same list object so references handed out stay live
        cached = self._cached_sections()
        if sections is not cached:
            cached[:] = sections

    def flush_sections(self) -> None:
        self._write_section_data([section.to_array() for section in self._cached_sections()])


class LayoutSectionItemList(SectionListMixin):
    """Live view over the layout field of a content entity"""

    def __init__(self, entity, field_name: str):
        self.entity = entity
        self.field_name = field_name

    def get_sections(self) -> list[Section]:
        return self.entity._cached_sections()

    def _set_sections(self, sections: list[Section]) -> None:
        self.entity._replace_sections(sections)

    def is_empty(self) -> bool:
        return self.count() == 0

    def get_entity(self):
        return self.entity
