import pytest

from pycowork.stores.todo import TodoItem, TodoStore


def test_store_mutations_notify_and_keep_snapshots():
    store = TodoStore()
    seen = []
    store.subscribe(lambda: seen.append(len(store)))

    a = store.add_todo("write tests")
    snapshot = store.todos
    store.update_todo(a.id, status="in_progress")
    b = store.add_todo("ship")
    store.remove_todo(a.id)

    assert snapshot == [TodoItem(id=a.id, content="write tests", status="pending")]
    assert store.todos == [b]
    assert seen == [1, 1, 2, 1]


def test_update_rejects_unknown_status():
    store = TodoStore()
    item = store.add_todo("x")
    with pytest.raises(ValueError):
        store.update_todo(item.id, status="done")


def test_unsubscribe():
    store = TodoStore()
    calls = []
    unsub = store.subscribe(lambda: calls.append(1))
    unsub()
    store.clear_todos()
    assert calls == []


def test_broken_listener_does_not_break_mutation():
    store = TodoStore()

    def bad():
        raise RuntimeError("view crashed")

    store.subscribe(bad)
    store.add_todo("still works")
    assert len(store) == 1


@pytest.mark.asyncio
async def test_todo_write_replaces_list_and_keeps_ids(registry, ctx):
    await registry.invoke(
        "todoWrite",
        {"todos": [{"id": "A", "content": "X", "status": "pending"}, {"content": "Y", "status": "pending"}]},
        ctx,
    )
    res = await registry.invoke("todoWrite", {"todos": [{"id": "A", "content": "X", "status": "completed"}]}, ctx)

    assert ctx.todos.todos == [TodoItem(id="A", content="X", status="completed")]
    d = res.to_dict()
    assert d["success"] is True
    assert d["message"] == "Updated 1 todo(s)"


@pytest.mark.asyncio
async def test_todo_write_generates_missing_ids(registry, ctx):
    await registry.invoke("todoWrite", {"todos": [{"content": "a", "status": "pending"}]}, ctx)
    [item] = ctx.todos.todos
    assert item.id.startswith("todo-")
    assert item.id.endswith("-0")
