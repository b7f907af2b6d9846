from leadconsole.core.generation import ViewGeneration


def test_tokens_go_stale_when_view_moves_on():
    generation = ViewGeneration()
    first = generation.begin()
    assert generation.is_current(first)
    second = generation.begin()
    assert not generation.is_current(first)
    assert generation.is_current(second)
    generation.invalidate()
    assert not generation.is_current(second)
