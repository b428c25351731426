"""Testes do parsing de respostas JSON e dos prompts."""

from __future__ import annotations

import pytest

from imobi_ai.ai.openai_parser import parse_insights_response, parse_lead_profile_response
from imobi_ai.ai.openai_prompts import (
    LEAD_PROFILE_FIELDS,
    SYSTEM_INSTRUCTION,
    format_conversation_text,
    get_insights_prompt,
    get_lead_extraction_prompt,
)
from imobi_ai.domain.enums import Sender
from imobi_ai.domain.errors import GenerationServiceError
from imobi_ai.domain.models import Message


class TestLeadProfileParsing:
    def test_parses_camel_case_json(self):
        raw = '{"propertyType": "Casa", "bedrooms": 3, "missingFields": ["Orçamento"]}'

        profile = parse_lead_profile_response(raw)

        assert profile.property_type == "Casa"
        assert profile.bedrooms == "3"
        assert profile.missing_fields == ["Orçamento"]

    def test_strips_markdown_fences(self):
        raw = '```json\n{"region": "Zona Sul"}\n```'

        assert parse_lead_profile_response(raw).region == "Zona Sul"

    def test_empty_response_is_empty_profile(self):
        profile = parse_lead_profile_response("")

        assert profile.populated_fields == []
        assert profile.missing_fields == []

    def test_single_missing_field_string_is_wrapped(self):
        profile = parse_lead_profile_response('{"missingFields": "Região"}')

        assert profile.missing_fields == ["Região"]

    def test_missing_fields_of_unexpected_type_are_dropped(self):
        profile = parse_lead_profile_response('{"missingFields": {"campo": "Região"}}')

        assert profile.missing_fields == []

    def test_invalid_json_raises(self):
        with pytest.raises(GenerationServiceError):
            parse_lead_profile_response("não é json")

    def test_non_object_raises(self):
        with pytest.raises(GenerationServiceError):
            parse_lead_profile_response("[1, 2]")


class TestInsightsParsing:
    def test_parses_insights(self):
        raw = (
            '{"insights": [{"title": "Entrada", "description": "Principal objeção"}],'
            ' "recommendations": ["Oferecer simulação"]}'
        )

        result = parse_insights_response(raw)

        assert result.insights[0].title == "Entrada"
        assert result.recommendations == ["Oferecer simulação"]

    def test_schema_mismatch_raises(self):
        with pytest.raises(GenerationServiceError):
            parse_insights_response('{"insights": "texto"}')


class TestPrompts:
    def test_system_instruction_forbids_credit_guarantee(self):
        assert "Nunca garanta aprovação de crédito" in SYSTEM_INSTRUCTION

    def test_extraction_prompt_lists_all_fields(self):
        prompt = get_lead_extraction_prompt()

        for name in LEAD_PROFILE_FIELDS:
            assert f'"{name}"' in prompt
        assert "Instruções de Extração" in prompt

    def test_insights_prompt(self):
        assert "Instruções de Análise" in get_insights_prompt()

    def test_format_conversation_text(self):
        messages = [
            Message(text="Oi", sender=Sender.CLIENT),
            Message(text="Olá!", sender=Sender.AI),
        ]

        assert format_conversation_text(messages) == "client: Oi\nai: Olá!"
