from app.models.user import User
from app.models.substation import Substation
from app.models.component_polygon import ComponentPolygon
from app.models.point_annotation import PointAnnotation

__all__ = ["User", "Substation", "ComponentPolygon", "PointAnnotation"]
