import pytest
from pydantic import ValidationError

from notification_store.schemas.refs import GroupMember, GroupOwner, Ref


def test_ref_of_accepts_ref_tuple_and_mapping():
    ref = Ref(type='User', id='1')
    assert Ref.of(ref) is ref
    assert Ref.of(('User', 1)) == ref
    assert Ref.of({'type': 'User', 'id': '1'}) == ref


def test_ref_normalises_id_to_string():
    assert Ref(type='Comment', id=42).id == '42'


def test_ref_is_hashable_and_frozen():
    ref = Ref(type='User', id='1')
    assert len({ref, Ref(type='User', id=1)}) == 1
    with pytest.raises(ValidationError):
        ref.id = '2'


@pytest.mark.parametrize('payload', [{'type': '', 'id': '1'}, {'type': 'User', 'id': None}, {'type': 'User', 'id': ' '}])
def test_ref_rejects_blank_parts(payload):
    with pytest.raises(ValidationError):
        Ref(**payload)


def test_ref_of_rejects_unknown_shapes():
    with pytest.raises(TypeError):
        Ref.of(42)


def test_group_roles_are_tagged():
    assert GroupOwner().kind == 'owner'
    member = GroupMember(owner_id=7)
    assert member.kind == 'member'
    assert member.owner_id == 7
