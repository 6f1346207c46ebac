"""Tests for the cached node registry behind NodeValidator."""

import asyncio

import pytest

from n8n_workflow_builder.api_client import N8nApiError
from n8n_workflow_builder.domain.node_types import FALLBACK_NODES
from n8n_workflow_builder.node_validator import InvalidNode, NodeValidator, ValidationResult
from tests.conftest import CATALOG_ENTRIES, FakeCatalogSource


@pytest.fixture
def validator(catalog_source, clock):
    return NodeValidator(catalog_source, cache_duration=3600, clock=clock)


@pytest.mark.asyncio
class TestValidate:

    async def test_known_type_is_valid(self, validator):
        result = await validator.validate('n8n-nodes-base.httpRequest')
        assert result == ValidationResult(valid=True)
        assert result.to_dict() == {'valid': True}

    async def test_typo_gets_suggestion(self, validator):
        result = await validator.validate('n8n-nodes-base.merg')
        assert result == ValidationResult(valid=False, suggestion='n8n-nodes-base.merge')

    async def test_wrong_case_is_invalid_but_suggested(self, validator):
        result = await validator.validate('N8N-NODES-BASE.MERGE')
        assert not result.valid
        assert result.suggestion == 'n8n-nodes-base.merge'

    async def test_unrelated_type_has_no_suggestion(self, validator):
        result = await validator.validate('Foo')
        assert result == ValidationResult(valid=False)
        assert result.to_dict() == {'valid': False}

    async def test_empty_string(self, validator):
        result = await validator.validate('')
        assert result == ValidationResult(valid=False)

    async def test_non_string_does_not_raise(self, validator):
        result = await validator.validate(None)
        assert result == ValidationResult(valid=False)


@pytest.mark.asyncio
class TestValidateMany:

    async def test_returns_only_invalid_in_input_order(self, clock):
        validator = NodeValidator(FakeCatalogSource([{'name': 'known'}]), clock=clock)
        invalid = await validator.validate_many(['a', 'known', 'b'])
        assert invalid == [InvalidNode('a'), InvalidNode('b')]
        assert [i.to_dict() for i in invalid] == [{'node_type': 'a'}, {'node_type': 'b'}]

    async def test_duplicates_reported_each_time(self, validator):
        invalid = await validator.validate_many(['nope', 'nope'])
        assert len(invalid) == 2

    async def test_includes_suggestions(self, validator):
        invalid = await validator.validate_many(['n8n-nodes-base.httpRequst'])
        assert invalid[0].to_dict() == {
            'node_type': 'n8n-nodes-base.httpRequst',
            'suggestion': 'n8n-nodes-base.httpRequest',
        }

    async def test_all_valid_returns_empty(self, validator):
        assert await validator.validate_many(['n8n-nodes-base.merge']) == []

    async def test_single_load_for_many_types(self, validator, catalog_source):
        await validator.validate_many(['x', 'y', 'z'])
        assert catalog_source.calls == 1

    async def test_workflow_nodes(self, validator):
        nodes = [
            {'name': 'Fetch', 'type': 'n8n-nodes-base.httpRequest'},
            {'name': 'Bad', 'type': 'n8n-nodes-base.bogus'},
        ]
        invalid = await validator.validate_workflow_nodes(nodes)
        assert [i.node_type for i in invalid] == ['n8n-nodes-base.bogus']


@pytest.mark.asyncio
class TestListing:

    async def test_list_types_in_catalog_order(self, validator):
        assert await validator.list_types() == [e['name'] for e in CATALOG_ENTRIES]

    async def test_list_descriptors(self, validator):
        descriptors = await validator.list_descriptors()
        assert descriptors[0].display_name == 'HTTP Request'
        assert descriptors[0].version == 4
        assert descriptors[-1].display_name == 'n8n-nodes-base.noOp'

    async def test_entries_without_name_skipped(self, clock):
        source = FakeCatalogSource([{'displayName': 'Nameless'}, {'name': 'a.b'}])
        validator = NodeValidator(source, clock=clock)
        assert await validator.list_types() == ['a.b']

    async def test_returned_lists_are_copies(self, validator):
        types = await validator.list_types()
        types.clear()
        assert await validator.list_types()


@pytest.mark.asyncio
class TestRefreshPolicy:

    async def test_fresh_registry_not_reloaded(self, validator, catalog_source, clock):
        await validator.validate('n8n-nodes-base.merge')
        clock.advance(3599)
        await validator.validate('n8n-nodes-base.merge')
        assert catalog_source.calls == 1

    async def test_stale_registry_reloaded(self, validator, catalog_source, clock):
        await validator.list_types()
        catalog_source.entries = [{'name': 'n8n-nodes-base.wait'}]
        clock.advance(3600)
        assert await validator.list_types() == ['n8n-nodes-base.wait']
        assert catalog_source.calls == 2
        assert validator.last_fetch_time == clock.now

    async def test_zero_nodes_is_not_a_failure(self, clock):
        source = FakeCatalogSource([])
        validator = NodeValidator(source, clock=clock)
        assert await validator.list_types() == []
        assert validator.last_fetch_time == clock.now

    async def test_empty_registry_reloads_on_next_access(self, clock):
        source = FakeCatalogSource([])
        validator = NodeValidator(source, clock=clock)
        await validator.list_types()
        source.entries = [{'name': 'a.b'}]
        assert await validator.list_types() == ['a.b']
        assert source.calls == 2


@pytest.mark.asyncio
class TestLoadFailures:

    async def test_first_load_failure_uses_fallback(self, clock):
        source = FakeCatalogSource(error=N8nApiError('n8n API error (500): boom', 500))
        validator = NodeValidator(source, clock=clock)
        for node in FALLBACK_NODES:
            assert (await validator.validate(node.name)).valid
        assert (await validator.validate('n8n-nodes-base.start')).valid
        assert validator.last_fetch_time == clock.now

    async def test_fallback_is_treated_as_fresh(self, clock):
        source = FakeCatalogSource(error=N8nApiError('Network error: refused'))
        validator = NodeValidator(source, clock=clock)
        await validator.list_types()
        await validator.list_types()
        assert source.calls == 1

    async def test_failure_keeps_previous_data(self, validator, catalog_source, clock):
        await validator.list_types()
        loaded_at = validator.last_fetch_time
        catalog_source.error = ValueError('malformed payload')
        clock.advance(7200)

        result = await validator.validate('@n8n/n8n-nodes-langchain.agent')

        assert result.valid
        assert catalog_source.calls == 2
        assert validator.last_fetch_time == loaded_at
        assert 'n8n-nodes-base.start' not in await validator.list_types()

    async def test_failed_refresh_retried_on_next_access(self, validator, catalog_source, clock):
        await validator.list_types()
        catalog_source.error = RuntimeError('unexpected')
        clock.advance(3600)
        await validator.list_types()
        catalog_source.error = None
        await validator.list_types()
        assert catalog_source.calls == 3

    async def test_state_reset_after_failure(self, clock):
        validator = NodeValidator(FakeCatalogSource(error=OSError('down')), clock=clock)
        await validator.list_types()
        assert not validator.is_fetching

    async def test_int_name_is_skipped(self, clock):
        validator = NodeValidator(FakeCatalogSource([{'name': 5}, {'name': 'a.b'}]), clock=clock)
        result = await validator.validate('a.c')
        assert result == ValidationResult(valid=False, suggestion='a.b')
        assert await validator.list_types() == ['a.b']

    async def test_list_name_is_skipped(self, clock):
        validator = NodeValidator(FakeCatalogSource([{'name': ['x']}, {'name': 'a.b'}]), clock=clock)
        assert (await validator.validate('a.c')).suggestion == 'a.b'
        assert await validator.list_types() == ['a.b']

    async def test_non_dict_entries_are_skipped(self, clock):
        validator = NodeValidator(FakeCatalogSource(['a.b', None, {'name': 'a.b'}]), clock=clock)
        assert await validator.list_types() == ['a.b']

    async def test_unparseable_entries_use_fallback(self, clock):

        class NotAListSource(FakeCatalogSource):
            async def fetch_nodes(self):
                self.calls += 1
                return 5

        validator = NodeValidator(NotAListSource(), clock=clock)
        result = await validator.validate('n8n-nodes-base.start')
        assert result.valid
        assert validator.last_fetch_time == clock.now
        assert not validator.is_fetching

    async def test_unparseable_refresh_keeps_previous_data(self, clock):

        class FlakySource(FakeCatalogSource):
            async def fetch_nodes(self):
                entries = await super().fetch_nodes()
                return entries if self.calls == 1 else 5

        validator = NodeValidator(FlakySource(CATALOG_ENTRIES), clock=clock)
        before = await validator.list_types()
        clock.advance(7200)
        assert await validator.list_types() == before


@pytest.mark.asyncio
class TestSingleFlight:

    async def test_concurrent_callers_share_one_load(self, validator, catalog_source):
        catalog_source.gate = asyncio.Event()
        tasks = [
            asyncio.ensure_future(validator.validate('n8n-nodes-base.merge'))
            for _ in range(5)
        ]
        await asyncio.sleep(0)
        assert validator.is_fetching

        catalog_source.gate.set()
        results = await asyncio.gather(*tasks)

        assert catalog_source.calls == 1
        assert all(r.valid for r in results)
        assert not validator.is_fetching

    async def test_concurrent_callers_share_failure_outcome(self, clock):
        source = FakeCatalogSource(error=N8nApiError('Network error: timeout'))
        source.gate = asyncio.Event()
        validator = NodeValidator(source, clock=clock)
        tasks = [asyncio.ensure_future(validator.list_types()) for _ in range(3)]
        await asyncio.sleep(0)
        source.gate.set()
        results = await asyncio.gather(*tasks)

        assert source.calls == 1
        expected = [n.name for n in FALLBACK_NODES]
        assert results == [expected, expected, expected]

    async def test_cancelled_caller_does_not_cancel_shared_load(self, validator, catalog_source):
        catalog_source.gate = asyncio.Event()
        first = asyncio.ensure_future(validator.list_types())
        second = asyncio.ensure_future(validator.list_types())
        await asyncio.sleep(0)

        first.cancel()
        await asyncio.sleep(0)
        catalog_source.gate.set()

        assert len(await second) == len(CATALOG_ENTRIES)
        assert first.cancelled()
        assert catalog_source.calls == 1
        assert not validator.is_fetching

    async def test_readers_see_old_registry_during_refresh(self, validator, catalog_source, clock):
        old = await validator.list_types()
        catalog_source.entries = [{'name': 'n8n-nodes-base.wait'}]
        catalog_source.gate = asyncio.Event()
        clock.advance(3600)

        refresh = asyncio.ensure_future(validator.list_types())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert validator.is_fetching
        assert list(validator._registry) == old

        catalog_source.gate.set()
        assert await refresh == ['n8n-nodes-base.wait']
