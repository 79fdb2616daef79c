from formbuilder.builder.history import History


def test_undo_redo_moves_pointer():
    history = History("a")
    history.set("b")
    history.set("c")

    assert history.undo() == "b"
    assert history.undo() == "a"
    assert history.undo() is None
    assert history.redo() == "b"
    assert history.state == "b"


def test_set_truncates_redo_tail():
    history = History("a")
    history.set("b")
    history.set("c")
    history.undo()

    history.set("x")

    assert history.state == "x"
    assert not history.can_redo
    assert history.undo() == "b"


def test_history_is_bounded():
    history = History(0, limit=3)
    for value in range(1, 6):
        history.set(value)

    assert len(history) == 3
    assert history.undo() == 4
    assert history.undo() == 3
    assert not history.can_undo


def test_reset():
    history = History("a")
    history.set("b")

    history.reset("z")

    assert history.state == "z"
    assert not history.can_undo
    assert not history.can_redo
