import json
import logging
import re

from langchain_core.messages import HumanMessage

from core.models import AnalysisOutcome

logger = logging.getLogger(__name__)

# A fence only counts when it wraps the whole reply.
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

ANALYSIS_PROMPT = """Atue como o motor de análise do repositório layout_reverse_enginee. Sua tarefa é desestruturar artes da Conexão Implantes em dados JSON.

Regras de Extração:

Branding: Identifique os tons de azul e dourado e a tipografia Sans-Serif.

Layout: Mapeie as coordenadas (x, y) e o grid lateral (alinhamento à esquerda).

Assets: Identifique quais implantes estão na imagem e sugira o arquivo correspondente na estrutura do Heverton-web/materials.

Copy: Extraia Headline, Subheadline e CTA separadamente.

Formato de Saída (Obrigatório):
Responda apenas com o JSON estruturado para que a V1 possa interpretá-lo sem erros."""


def _string(description: str) -> dict:
    return {"type": "string", "description": description}


def _string_list(description: str) -> dict:
    return {"type": "array", "items": {"type": "string"}, "description": description}


def _object(properties: dict) -> dict:
    return {"type": "object", "properties": properties, "required": list(properties)}


ANALYSIS_RESPONSE_SCHEMA = _object({
    "branding": _object({
        "paleta": _string_list("Códigos hexadecimais das cores"),
        "tipografia": _string("Análise da tipografia"),
        "efeitos": _string_list("Efeitos visuais aplicados"),
    }),
    "elementos": _object({
        "objetosCentrais": _string_list("Objetos principais na imagem"),
        "tratamentoVisual": _string("Descrição do tratamento visual (nitidez, brilho, desfoque)"),
    }),
    "informacoes": _object({
        "headline": _string("Título principal"),
        "subheadline": _string("Subtítulo"),
        "cta": _string("Call to Action"),
        "outrosTextos": _string_list("Outros textos encontrados"),
    }),
    "diagramacao": _object({
        "grid": _string("Descrição do grid utilizado"),
        "alinhamento": _string("Tipo de alinhamento predominante"),
        "posicionamento": _string_list("Posição espacial dos elementos"),
    }),
    "materiais": _object({
        "sugestoesRepositorio": _string_list("Sugestões de arquivos do repositório Heverton-web/materials"),
    }),
    "explicacao_tecnica": _string("Explicação técnica de por que o design funciona"),
})


class AnalysisError(RuntimeError):
    """The analysis service answered, but not with a usable JSON object."""


class EmptyResponseError(AnalysisError):
    pass


class MalformedResponseError(AnalysisError):
    pass


class ImageAnalyzer:
    """
    Sends one reference image to a multimodal chat model and validates the
    structured reply.

    The chat model is injected; build it with
    `LLMFactory.create(..., response_schema=ANALYSIS_RESPONSE_SCHEMA)` so the
    provider constrains generation to the schema.
    """

    def __init__(self, llm):
        self.llm = llm

    def analyze(self, base64_payload: str, mime_type: str) -> AnalysisOutcome:
        """
        One request, one parsed response.

        Raises:
            EmptyResponseError: the reply had no text
            MalformedResponseError: the reply was not a JSON object
        Transport errors from the model propagate unchanged.
        """
        logger.info(f"🔍 Requesting layout analysis ({mime_type})")
        response = self.llm.invoke(self.build_messages(base64_payload, mime_type))
        return self._parse_response(response)

    async def aanalyze(self, base64_payload: str, mime_type: str) -> AnalysisOutcome:
        """Async variant of `analyze`."""
        logger.info(f"🔍 Requesting layout analysis ({mime_type})")
        response = await self.llm.ainvoke(self.build_messages(base64_payload, mime_type))
        return self._parse_response(response)

    def build_messages(self, base64_payload: str, mime_type: str) -> list:
        content = [
            {
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{base64_payload}"},
            },
            {
                "type": "text",
                "text": ANALYSIS_PROMPT + "\n\nJSON Schema:\n" + json.dumps(ANALYSIS_RESPONSE_SCHEMA, ensure_ascii=False),
            },
        ]
        return [HumanMessage(content=content)]

    def _parse_response(self, response) -> AnalysisOutcome:
        text = self._clean_json_output(self._response_text(response))
        if not text:
            raise EmptyResponseError("Analysis service returned an empty response")

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Analysis response is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"Analysis response must be a JSON object, got {type(payload).__name__}"
            )

        outcome = AnalysisOutcome.from_payload(payload)
        if outcome.is_complete:
            logger.info("✅ Layout analysis complete")
        else:
            logger.warning(f"⚠️ Partial analysis, missing: {', '.join(outcome.missing_fields)}")
        return outcome

    def _response_text(self, response) -> str:
        """Flatten message content, which may be a string or a list of blocks."""
        content = getattr(response, "content", response)
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)

    def _clean_json_output(self, content: str) -> str:
        """Strips a markdown code fence around the JSON, if any."""
        content = content.strip()
        match = CODE_FENCE_PATTERN.match(content)
        if match:
            return match.group(1)
        return content
