"""Layout tempstore repository - holds unsaved layout edits per section storage"""

import logging
from copy import deepcopy

from fastapi import Depends
from sqlalchemy.orm import Session

from db.session import get_db
from models import LayoutTempstoreEntry
from schemas.section import Section

logger = logging.getLogger(__name__)


class LayoutTempstoreRepository:
    def __init__(self, session: Session):
        self.session = session

    def _entry(self, section_storage) -> LayoutTempstoreEntry | None:
        storage_type, storage_id = section_storage.get_tempstore_key()
        return self.session.get(LayoutTempstoreEntry, (storage_type, storage_id))

    def has(self, section_storage) -> bool:
        return self._entry(section_storage) is not None

    def get(self, section_storage):
        """
        Apply the stored draft to the storage's section list, if there is one.

        The backing record is changed in memory only; it is persisted when
        the layout is saved.
        """
        entry = self._entry(section_storage)
        if entry is not None:
            section_list = section_storage.get_section_list()
            section_list.remove_all_sections()
            for item in entry.sections:
                section_list.append_section(Section.from_array(deepcopy(item)))
        return section_storage

    def set(self, section_storage) -> None:
        storage_type, storage_id = section_storage.get_tempstore_key()
        data = [section.to_array() for section in section_storage.get_sections()]

        entry = self._entry(section_storage)
        if entry is None:
            entry = LayoutTempstoreEntry(storage_type=storage_type, storage_id=storage_id, sections=data)
            self.session.add(entry)
        else:
            entry.sections = data
        self.session.commit()
        logger.debug(f"Stored layout draft for {storage_type}.{storage_id}")

    def delete(self, section_storage) -> None:
        entry = self._entry(section_storage)
        if entry is not None:
            self.session.delete(entry)
            self.session.commit()


def get_layout_tempstore_repository(db: Session = Depends(get_db)) -> LayoutTempstoreRepository:
    """Dependency for layout tempstore repository"""
    return LayoutTempstoreRepository(db)
