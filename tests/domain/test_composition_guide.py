"""Tests for the workflow composition guide."""

import pytest

from n8n_workflow_builder.domain.composition_guide import GUIDE_SECTIONS, get_guide


class TestGetGuide:

    def test_whole_guide_contains_every_section(self):
        guide = get_guide()
        for text in GUIDE_SECTIONS.values():
            assert text in guide

    def test_single_section(self):
        assert get_guide('node_types').startswith('# Node Types')

    def test_unknown_section_lists_available(self):
        with pytest.raises(KeyError) as exc_info:
            get_guide('nope')
        assert 'core_principles' in exc_info.value.args[0]
