"""
Protobuf types of the chain's ``nftmngr`` module.

The module types are not shipped by ``cosmpy``, so the two transaction
messages the SDK sends are declared here as a file descriptor and loaded
into a private descriptor pool. The resulting classes serialize exactly like
generated ``_pb2`` classes and pack into ``google.protobuf.Any`` the same way.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

NFTMNGR_PACKAGE = "thesixnetwork.sixprotocol.nftmngr"

# (message name, [(field name, field number)]); every field is a string.
_MESSAGES = (
    ("MsgCreateNFTSchema", [("creator", 1), ("nftSchemaBase64", 2)]),
    ("MsgCreateMetadata", [("creator", 1), ("nftSchemaCode", 2), ("tokenId", 3), ("base64NFTData", 4)]),
)


def _build_pool() -> descriptor_pool.DescriptorPool:
    proto = descriptor_pb2.FileDescriptorProto(
        name="nftmngr/tx.proto",
        package=NFTMNGR_PACKAGE,
        syntax="proto3",
    )
    for name, fields in _MESSAGES:
        message = proto.message_type.add(name=name)
        for field_name, number in fields:
            message.field.add(
                name=field_name,
                number=number,
                type=descriptor_pb2.FieldDescriptorProto.TYPE_STRING,
                label=descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL,
                json_name=field_name,
            )
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(proto.SerializeToString())
    return pool


_POOL = _build_pool()


def _message_class(name: str):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(f"{NFTMNGR_PACKAGE}.{name}"))


MsgCreateNFTSchema = _message_class("MsgCreateNFTSchema")
MsgCreateMetadata = _message_class("MsgCreateMetadata")
