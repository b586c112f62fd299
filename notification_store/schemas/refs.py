"""Polymorphic references and group roles.

A :class:`Ref` names an external object by type and id without resolving it.
Group roles are a two-case sum: a record either owns its group
(:class:`GroupOwner`) or belongs to one (:class:`GroupMember`).
"""
from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator


class Ref(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    id: str

    @field_validator('type')
    @classmethod
    def check_type(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('reference type must not be empty')
        return value

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        if value is None:
            raise ValueError('reference id is required')
        value = str(value).strip()
        if not value:
            raise ValueError('reference id must not be empty')
        return value

    @classmethod
    def of(cls, value: Any) -> 'Ref':
        """Build a reference from a ``Ref``, a ``(type, id)`` pair or a mapping."""
        if isinstance(value, Ref):
            return value
        if isinstance(value, Mapping):
            return cls(type=value.get('type'), id=value.get('id'))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(type=value[0], id=value[1])
        raise TypeError(f'cannot build a reference from {type(value).__name__}')

    def __str__(self) -> str:
        return f'{self.type}#{self.id}'


class GroupOwner(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal['owner'] = 'owner'


class GroupMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal['member'] = 'member'
    owner_id: int


GroupRole = Union[GroupOwner, GroupMember]
