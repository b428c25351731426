"""Prompts e formatação para chamadas à OpenAI.

Responsabilidades:
- Definir a instrução de sistema do pré-atendimento imobiliário
- Formatar inputs de extração de lead e de análise de métricas
- Manter instruções JSON estruturadas
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic.alias_generators import to_camel

from imobi_ai.domain.models import LeadProfile, Message

SYSTEM_INSTRUCTION = (
    "Você é um assistente de pré-atendimento imobiliário humano, empático e eficiente. "
    "Seu objetivo é qualificar o lead naturalmente, coletando informações sobre região, "
    "tipo de imóvel, orçamento e entrada. Use termos como 'estimado' e 'sujeito a "
    "aprovação bancária'. Nunca garanta aprovação de crédito."
)

# Campos do LeadProfile na forma gravada (camelCase)
LEAD_PROFILE_FIELDS: tuple[str, ...] = tuple(
    to_camel(name) for name in LeadProfile.model_fields
)


def format_conversation_text(messages: Iterable[Message]) -> str:
    """Serializa a conversa como linhas `sender: texto`."""
    return "\n".join(f"{m.sender}: {m.text}" for m in messages)


def get_lead_extraction_prompt() -> str:
    """Retorna system prompt para extração do perfil do lead."""
    string_fields = [f for f in LEAD_PROFILE_FIELDS if f != "missingFields"]
    schema_lines = "\n".join(f'  "{name}": string | null,' for name in string_fields)

    return f"""Você extrai dados estruturados de conversas de pré-atendimento imobiliário.

## Instruções de Extração

1. Leia a conversa e preencha apenas o que o cliente informou.
2. Campos não informados devem ser null.
3. Em "missingFields", liste (em português) os dados de qualificação ainda ausentes.
4. Responda em JSON (válido) com este formato exato:
```json
{{
{schema_lines}
  "missingFields": [string]
}}
```

5. Sempre retorne JSON válido. Nunca adicione texto antes ou depois.
"""


def format_lead_extraction_input(conversation_text: str) -> str:
    """Formata input da extração."""
    return (
        "Extract lead information from the following conversation:\n\n"
        f"{conversation_text}\n\n"
        "Return the data in the specified JSON format."
    )


def get_insights_prompt() -> str:
    """Retorna system prompt para análise de métricas."""
    return """Você é um analista de performance de atendimento imobiliário.

## Instruções de Análise

1. Forneça exatamente 3 insights comportamentais e 3 recomendações para os corretores.
2. Responda em JSON (válido) com este formato exato:
```json
{
  "insights": [{"title": string, "description": string}],
  "recommendations": [string]
}
```

3. Sempre retorne JSON válido. Nunca adicione texto antes ou depois.
"""


def format_insights_input(metrics_text: str) -> str:
    """Formata input da análise de métricas."""
    return (
        "Analyze these real estate metrics and provide 3 key behavioral insights "
        f"and 3 agent recommendations:\n\n{metrics_text}"
    )
