from models.entity_view_display import EntityViewDisplay
from models.content_entity import ContentEntity, LAYOUT_FIELD_NAME
from models.field_config import FieldConfig
from models.layout_tempstore import LayoutTempstoreEntry
