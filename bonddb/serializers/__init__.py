"""Value serializers: CBOR, JSON and protobuf."""

__all__ = ["cbor_serializer", "json_serializer", "protobuf_serializer"]