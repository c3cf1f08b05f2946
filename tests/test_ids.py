import pytest

from sluice.errors import CollisionError, InvalidConfiguration
from sluice.ids import IdAllocator, stable_name


def test_stable_name_is_deterministic():
    assert stable_name('FirehoseBucket', 'AWS::S3::Bucket') == stable_name('FirehoseBucket', 'AWS::S3::Bucket')


def test_stable_name_keeps_seed_readable():
    lid = stable_name('Firehose-Bucket', 'AWS::S3::Bucket')
    assert lid.startswith('FirehoseBucket')
    assert lid.isalnum()


def test_stable_name_depends_on_kind():
    assert stable_name('Thing', 'AWS::S3::Bucket') != stable_name('Thing', 'AWS::IAM::Role')


def test_allocations_are_distinct():
    ids = IdAllocator()
    pairs = [
        ('FirehoseBucket', 'AWS::S3::Bucket'),
        ('FirehoseRole', 'AWS::IAM::Role'),
        ('FirehoseStream', 'AWS::KinesisFirehose::DeliveryStream'),
        ('FirehoseStream', 'AWS::S3::Bucket'),
    ]
    issued = [ids.allocate(seed, kind) for seed, kind in pairs]
    assert len(set(issued)) == len(pairs)


def test_reallocating_collides():
    ids = IdAllocator()
    ids.allocate('Bucket', 'AWS::S3::Bucket')
    with pytest.raises(CollisionError):
        ids.allocate('Bucket', 'AWS::S3::Bucket')


def test_reserve_collides_with_allocation():
    ids = IdAllocator()
    lid = ids.allocate('Bucket', 'AWS::S3::Bucket')
    with pytest.raises(CollisionError):
        ids.reserve(lid, 'AWS::IAM::Role')


def test_reserve_twice_collides():
    ids = IdAllocator()
    assert ids.reserve('Xformer', 'AWS::Lambda::Function') == 'Xformer'
    assert 'Xformer' in ids
    with pytest.raises(CollisionError):
        ids.reserve('Xformer', 'AWS::Lambda::Function')


@pytest.mark.parametrize('bad', ['', 'has space', 'dash-ed', None])
def test_reserve_rejects_bad_ids(bad):
    with pytest.raises(InvalidConfiguration):
        IdAllocator().reserve(bad, 'AWS::S3::Bucket')


def test_empty_seed():
    with pytest.raises(InvalidConfiguration):
        IdAllocator().allocate('', 'AWS::S3::Bucket')
