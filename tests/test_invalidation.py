from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from approvals.application import EntryStatus, InvalidationGraph, QueryCache, QueryKey, QueryView, Tab
from approvals.domain import AuthError, CommandAction, CommandState, DocumentKey, DocumentKind


def _loader(value):
    async def load():
        return value

    return load


def test_invalidation_is_scoped_to_the_mutated_kind():
    cache = QueryCache()
    budget_keys = [
        QueryKey(DocumentKind.BUDGET, QueryView.PENDING),
        QueryKey(DocumentKind.BUDGET, QueryView.APPROVED, "jsmith", None),
        QueryKey(DocumentKind.BUDGET, QueryView.INDICATORS),
    ]
    order_key = QueryKey(DocumentKind.PURCHASE_ORDER, QueryView.PENDING)

    async def scenario():
        for key in [*budget_keys, order_key]:
            await cache.fetch(key, _loader([key.view.value]))
        graph = InvalidationGraph(cache)
        return graph.on_mutation_settled(DocumentKind.BUDGET)

    stale = asyncio.run(scenario())

    assert set(stale) == set(budget_keys)
    assert all(cache.get(key).status is EntryStatus.STALE for key in budget_keys)
    assert cache.get(order_key).status is EntryStatus.FRESH


def test_visible_tab_is_refetched_immediately(logged_in, backend):
    backend.add_budget(1, 4521)
    backend.add_budget(1, 4522)
    service = logged_in

    async def scenario():
        await service.list_documents(DocumentKind.BUDGET)
        service.select_tab(DocumentKind.PURCHASE_ORDER, Tab.APPROVED)
        await service.list_documents(DocumentKind.PURCHASE_ORDER)
        await service.indicators(DocumentKind.BUDGET)

        service.request_action(DocumentKind.BUDGET, DocumentKey(1, 4521), CommandAction.APPROVE)
        result = await service.confirm()
        assert result.state is CommandState.SUCCEEDED
        assert service.graph.pending_refetches == 1
        await service.graph.drain()

    asyncio.run(scenario())

    pending_key = service.queries.pending_key(DocumentKind.BUDGET)
    entry = service.cache.get(pending_key)
    assert entry.status is EntryStatus.FRESH
    assert [doc.key.document_number for doc in entry.data] == [4522]
    assert backend.calls("/presupuestos/pendientes") == 2

    # not visible: stays stale until someone reads it
    indicators_key = service.queries.indicators_key(DocumentKind.BUDGET)
    assert service.cache.get(indicators_key).status is EntryStatus.STALE
    assert backend.calls("/presupuestos/indicadores") == 1

    # other kind untouched
    order_entries = [key for key in service.cache.keys() if key.kind is DocumentKind.PURCHASE_ORDER]
    assert order_entries
    assert all(service.cache.get(key).status is EntryStatus.FRESH for key in order_entries)


def test_failed_refetch_marks_entry_errored_but_command_succeeds(logged_in, backend):
    backend.add_order(1, 10)
    service = logged_in

    async def scenario():
        await service.list_documents(DocumentKind.PURCHASE_ORDER)
        service.request_action(DocumentKind.PURCHASE_ORDER, DocumentKey(1, 10), CommandAction.APPROVE)
        backend.fail_next["/ordenes-compra/pendientes"] = 503
        result = await service.confirm()
        await service.graph.drain()
        return result

    result = asyncio.run(scenario())

    assert result.state is CommandState.SUCCEEDED
    entry = service.cache.get(service.queries.pending_key(DocumentKind.PURCHASE_ORDER))
    assert entry.status is EntryStatus.ERRORED

    view = asyncio.run(service.list_documents(DocumentKind.PURCHASE_ORDER))
    assert view.documents == []


def test_rejected_token_on_refetch_ends_the_session(logged_in, backend):
    backend.add_budget(1, 4521)
    service = logged_in

    async def scenario():
        await service.list_documents(DocumentKind.BUDGET)
        service.request_action(DocumentKind.BUDGET, DocumentKey(1, 4521), CommandAction.APPROVE)
        backend.fail_next["/presupuestos/pendientes"] = 401
        result = await service.confirm()
        await service.graph.drain()
        return result

    result = asyncio.run(scenario())

    assert result.state is CommandState.SUCCEEDED
    assert not result.requires_login
    assert service.current_identity() is None
    assert len(service.cache) == 0


def test_refetch_auth_error_is_reported_to_the_callback():
    cache = QueryCache()
    key = QueryKey(DocumentKind.PURCHASE_ORDER, QueryView.PENDING)
    rejected = []

    async def scenario():
        await cache.fetch(key, _loader([]))

        async def reject():
            raise AuthError("token expired")

        cache.get(key).loader = reject
        graph = InvalidationGraph(cache, visible_keys=lambda: [key], on_auth_error=lambda: rejected.append(True))
        graph.on_mutation_settled(DocumentKind.PURCHASE_ORDER)
        await graph.drain()

    asyncio.run(scenario())

    assert rejected == [True]
    assert cache.get(key).status is EntryStatus.ERRORED
