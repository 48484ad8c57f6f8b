from draftink.core.annotations import AnnotationCollection, HistoryStack, TextAnnotation


def snapshots(count):
    collection = AnnotationCollection()
    result = []
    for i in range(count):
        collection = collection.add(TextAnnotation(page_index=0, x_pt=i, y_pt=i))
        result.append(collection)
    return result


def test_starts_with_single_snapshot():
    history = HistoryStack()
    assert len(history.current) == 0
    assert not history.can_undo()
    assert not history.can_redo()
    assert history.undo() is None
    assert history.redo() is None


def test_undo_then_redo_restores_collection():
    history = HistoryStack()
    for snapshot in snapshots(3):
        history.push(snapshot)

    before = history.current
    history.undo()
    assert history.current != before
    history.redo()
    assert history.current == before


def test_undo_walks_back_to_initial():
    initial = AnnotationCollection()
    history = HistoryStack(initial)
    pushed = snapshots(3)
    for snapshot in pushed:
        history.push(snapshot)

    assert history.undo() == pushed[1]
    assert history.undo() == pushed[0]
    assert history.undo() == initial
    assert history.undo() is None
    assert history.current == initial


def test_push_after_undo_discards_future():
    history = HistoryStack()
    first, second, third = snapshots(3)
    history.push(first)
    history.push(second)
    history.undo()

    history.push(third)
    assert history.current == third
    assert not history.can_redo()
    assert len(history) == 3
    assert history.undo() == first


def test_snapshots_are_not_affected_by_later_edits():
    history = HistoryStack()
    first, = snapshots(1)
    history.push(first)
    ann = first[0]

    history.push(history.current.update(ann.id, text="Edited"))
    history.undo()
    assert history.current[0].text == ann.text


def test_max_size_drops_oldest():
    history = HistoryStack(max_size=3)
    pushed = snapshots(5)
    for snapshot in pushed:
        history.push(snapshot)

    assert len(history) == 3
    assert history.undo() == pushed[3]
    assert history.undo() == pushed[2]
    assert history.undo() is None


def test_reset_clears_history():
    history = HistoryStack()
    for snapshot in snapshots(2):
        history.push(snapshot)
    loaded = AnnotationCollection()

    history.reset(loaded)
    assert history.current == loaded
    assert history.index == 0
    assert not history.can_undo()
    assert not history.can_redo()
