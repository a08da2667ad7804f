from shared.utils.object_id import new_object_id, is_object_id

def test_object_id_shape():
    object_id = new_object_id()
    assert len(object_id) == 24
    assert is_object_id(object_id)

def test_object_ids_sort_by_creation():
    ids = [new_object_id() for _ in range(50)]
    assert len(set(ids)) == 50
    assert sorted(ids) == ids

def test_is_object_id_rejects_malformed_values():
    assert not is_object_id('not-an-id')
    assert not is_object_id('ABCDEF0123456789ABCDEF01')
    assert not is_object_id(None)
    assert not is_object_id(12345)
