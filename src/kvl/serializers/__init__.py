"""Value serializers used by the stores."""

from kvl.serializers.base import Serializer
from kvl.serializers.jsondoc import JsonSerializer
from kvl.serializers.model import PydanticSerializer
from kvl.serializers.raw import BytesSerializer

__all__ = ["BytesSerializer", "JsonSerializer", "PydanticSerializer", "Serializer"]
