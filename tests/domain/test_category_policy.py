from finledger.domain.policies.categories import would_create_cycle


def _lookup(parents):
    return parents.get


def test_new_category_under_existing_tree_is_accepted():
    parents = {"child": "root", "root": None}

    assert would_create_cycle(None, "child", _lookup(parents)) is False


def test_moving_under_a_descendant_is_a_cycle():
    parents = {"grandchild": "child", "child": "root", "root": None}

    assert would_create_cycle("root", "grandchild", _lookup(parents)) is True


def test_moving_to_the_top_level_is_accepted():
    assert would_create_cycle("child", None, _lookup({})) is False


def test_corrupt_tree_stops_the_walk():
    parents = {"a": "b", "b": "a"}

    assert would_create_cycle("x", "a", _lookup(parents)) is True
