"""Layout Builder Service - the edit, save, cancel and revert workflow over a section storage"""

from dataclasses import dataclass

from fastapi import Depends

from core.logging_config import LogContext, get_logger
from repositories.layout_tempstore_repository import LayoutTempstoreRepository, get_layout_tempstore_repository
from schemas.section import Section
from services.section_storage.base import SectionStorageBase
from services.section_storage.overrides import OverridesSectionStorage

logger = get_logger(__name__)


class RevertNotSupportedError(RuntimeError):
    def __init__(self, storage_type: str):
        self.storage_type = storage_type
        super().__init__(f'The "{storage_type}" section storage cannot be reverted')


@dataclass
class PreparedLayout:
    section_storage: SectionStorageBase
    has_unsaved_changes: bool


class LayoutBuilderService:
    """
    Drives an editing session.

    Edits are kept in the tempstore until the layout is saved; the backing
    display or entity is only written by ``save_layout`` and ``revert_layout``.
    """

    def __init__(self, tempstore: LayoutTempstoreRepository):
        self.tempstore = tempstore

    def prepare_layout(self, section_storage: SectionStorageBase) -> PreparedLayout:
        """
        Start or resume editing.

        Resumes the stored draft when there is one. Otherwise a draft is
        started from the current layout, and an override with no sections of
        its own starts from a copy of its default layout.
        """
        if self.tempstore.has(section_storage):
            return PreparedLayout(self.tempstore.get(section_storage), has_unsaved_changes=True)

        if isinstance(section_storage, OverridesSectionStorage) and not section_storage.is_overridden():
            for section in section_storage.get_default_section_storage().get_sections():
                section_storage.append_section(Section.from_array(section.to_array()))

        self.tempstore.set(section_storage)
        return PreparedLayout(section_storage, has_unsaved_changes=False)

    def update_sections(self, section_storage: SectionStorageBase, sections: list[Section]) -> SectionStorageBase:
        """Replace the draft with the given sections"""
        section_storage.remove_all_sections()
        for section in sections:
            section_storage.append_section(section)
        self.tempstore.set(section_storage)
        return section_storage

    def save_layout(self, section_storage: SectionStorageBase):
        section_storage = self.tempstore.get(section_storage)
        storage_id = section_storage.save()
        self.tempstore.delete(section_storage)
        with _log_context(section_storage):
            logger.info_ctx("Layout saved", sections=section_storage.count())
        return storage_id

    def cancel_layout(self, section_storage: SectionStorageBase) -> None:
        self.tempstore.delete(section_storage)
        with _log_context(section_storage):
            logger.info("Layout changes discarded")

    def revert_layout(self, section_storage: SectionStorageBase):
        """Drop an override so the entity falls back to its default layout"""
        if not section_storage.provides_revert:
            raise RevertNotSupportedError(section_storage.get_storage_type())

        section_storage.remove_all_sections()
        storage_id = section_storage.save()
        self.tempstore.delete(section_storage)
        with _log_context(section_storage):
            logger.info("Layout reverted to defaults")
        return storage_id


def _log_context(section_storage: SectionStorageBase) -> LogContext:
    return LogContext(
        section_storage_type=section_storage.get_storage_type(),
        section_storage_id=section_storage.get_storage_id(),
    )


def get_layout_builder_service(
    tempstore: LayoutTempstoreRepository = Depends(get_layout_tempstore_repository),
) -> LayoutBuilderService:
    return LayoutBuilderService(tempstore)
