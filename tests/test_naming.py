from topic_resource.domain.naming import canonical_topic_name, canonical_username, short_stack_id

from .fakes import STACK_ID, STACK_SUFFIX


def test_short_stack_id_is_stable():
    assert short_stack_id("test") == "T6DNBAMI"
    assert short_stack_id(STACK_ID) == STACK_SUFFIX
    assert short_stack_id(STACK_ID) == short_stack_id(STACK_ID)


def test_short_stack_id_differs_per_stack():
    other = "arn:aws:cloudformation:us-east-1:123456789012:stack/other/2"
    assert short_stack_id(other) == "L2SY2AN5"
    assert short_stack_id(other) != short_stack_id(STACK_ID)


def test_short_stack_id_alphabet():
    suffix = short_stack_id("any stack")
    assert len(suffix) == 8
    assert set(suffix) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZ234567")


def test_canonical_names():
    assert canonical_topic_name("orders", "T6DNBAMI") == "orders-T6DNBAMI"
    assert canonical_username("alice", "T6DNBAMI") == "AmazonMSK_alice_T6DNBAMI"
