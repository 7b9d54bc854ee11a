"""
Gemini text-generation adapter for enriching blocks of agreement records.

Each block is sent in a single generateContent request together with a
fixed Portuguese instruction prompt. The generated text is expected to hold
a JSON array with the corrected records in the same shape they were sent.
"""

import json
import httpx
from typing import List, Dict, Any, Optional

from core.config import ImportConfig
from core.exceptions import (
    EnrichmentAPIError,
    EnrichmentResponseError,
    EnrichmentParseError,
)
from ingestion.enrichment.json_extraction import extract_json_array
from ingestion.transformers.normalizer import json_safe
import logging

logger = logging.getLogger(__name__)

ENRICHMENT_PROMPT = """
Você é um especialista em processamento de dados de convenções coletivas trabalhistas.
Sua tarefa é analisar, estruturar e enriquecer os dados brutos de convenções coletivas.

Para cada entrada nos dados:
1. Identifique e normalize os campos principais: SINDICATO, ESTADO, DATA BASE, VIGENCIA_INICIO, VIGENCIA_FIM
2. Estruture corretamente os dados de pisos salariais por cargo, incluindo:
   - CARGO, CARGA HORÁRIA, PISO SALARIAL
   - Calcule VALOR HORA NORMAL, VALOR HORA EXTRA 50%, VALOR HORA EXTRA 100% quando disponíveis
3. Extraia informações sobre benefícios:
   - VALE REFEIÇÃO (normalize para um formato padrão)
   - VALE REFEIÇÃO VALOR (extraia apenas o valor numérico)
   - ASSISTENCIA MÉDICA (normalize para SIM/NÃO)
   - SEGURO DE VIDA (normalize para SIM/NÃO)
   - UNIFORME (normalize para SIM/NÃO)
4. Identifique particularidades e licenças, organizando-as adequadamente
5. Complete dados faltantes com base em convenções similares quando possível

Retorne os dados estruturados no mesmo formato que recebeu, porém com as correções e enriquecimentos.
"""

DATA_SEPARATOR = "\n\nDados para processar:\n"


class GeminiEnricher:
    """
    Send record blocks to Gemini and return the enriched records.

    No retries are attempted: a failed block is reported to the caller,
    which decides whether the run continues.
    """

    def __init__(self, config: ImportConfig):
        self.config = config

    @property
    def endpoint(self) -> str:
        return f"{self.config.gemini_base_url.rstrip('/')}/models/{self.config.gemini_model}:generateContent"

    def build_payload(self, block: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Build the generateContent request body for a block"""
        data = json.dumps(json_safe(block), ensure_ascii=False)
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": ENRICHMENT_PROMPT + DATA_SEPARATOR + data}]
                }
            ],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": self.config.max_output_tokens,
            }
        }

    async def enrich_block(self, block: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Enrich one block of records.

        Args:
            block: Records as read from the spreadsheet

        Returns:
            The enriched records (non-object items are dropped)

        Raises:
            EnrichmentAPIError: Transport failure or non-2xx status
            EnrichmentResponseError: Response lacks candidate text
            EnrichmentParseError: No JSON array in the generated text
        """
        context = {"model": self.config.gemini_model, "block_size": len(block)}
        logger.info(f"Sending {len(block)} records to {self.config.gemini_model}")

        try:
            async with httpx.AsyncClient(timeout=self.config.gemini_timeout_seconds) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.config.gemini_api_key},
                    headers={"Content-Type": "application/json"},
                    json=self.build_payload(block),
                )
        except httpx.HTTPError as e:
            raise EnrichmentAPIError(
                "Failed to reach Gemini API",
                context=context,
                original_exception=e
            )

        if not 200 <= response.status_code < 300:
            raise EnrichmentAPIError(
                f"Gemini API returned {response.status_code}",
                context={**context, "response_body": response.text[:500]},
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            raise EnrichmentResponseError(
                "Gemini API response is not JSON",
                context={**context, "response_body": response.text[:500]},
                original_exception=e
            )

        text = self._candidate_text(body)
        if text is None:
            raise EnrichmentResponseError(
                "Gemini API response has no candidate text",
                context=context
            )

        items = extract_json_array(text)
        if items is None:
            raise EnrichmentParseError(
                "Gemini response does not contain a valid JSON array",
                context={**context, "response_excerpt": text[:200]}
            )

        records = [item for item in items if isinstance(item, dict)]
        if len(records) != len(items):
            logger.warning(f"Dropped {len(items) - len(records)} non-object items from Gemini response")

        logger.info(f"Gemini returned {len(records)} records")
        return records

    @staticmethod
    def _candidate_text(body: Any) -> Optional[str]:
        """Text of the first part of the first candidate, if present"""
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) and text else None
