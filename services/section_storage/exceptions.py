"""Errors raised by the section storage layer"""


class InvalidStorageIdError(ValueError):
    def __init__(self, storage_id, storage_type: str):
        self.storage_id = storage_id
        self.storage_type = storage_type
        super().__init__(f'The "{storage_id}" ID for the "{storage_type}" section storage type is invalid')


class ContextException(Exception):
    pass


class UnknownSectionStorageTypeError(LookupError):
    def __init__(self, storage_type: str):
        self.storage_type = storage_type
        super().__init__(f'The "{storage_type}" section storage type does not exist.')


class SectionListAssignmentError(RuntimeError):
    pass
