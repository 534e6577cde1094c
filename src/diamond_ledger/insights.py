# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
AI-generated business insights (Google Gemini).

The generator receives an immutable snapshot of the records, builds a
plain-text prompt and returns the model's answer. It never raises: a
missing API key or any failure of the remote call yields a fixed message
so that the dashboard keeps working offline.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import google.generativeai as genai

from .engine import DEFAULT_FACTORS, Factors, compute_sale_metrics
from .records import Expense, MonthlyCommission, Sale

logger = logging.getLogger(__name__)

MAX_SALES = 30
MAX_EXPENSES = 10

MISSING_KEY_MESSAGE = (
    "API Key is missing or not configured correctly in the environment."
)
EMPTY_RESPONSE_MESSAGE = (
    "Não foi possível gerar insights no momento. Tente novamente."
)
FAILURE_MESSAGE = "Falha ao analisar dados. Por favor, tente novamente mais tarde."


@dataclass(frozen=True)
class InsightSnapshot:
    """Records handed to the insight generator."""

    sales: Sequence[Sale]
    commissions: Sequence[MonthlyCommission]
    expenses: Sequence[Expense]
    factors: Factors = DEFAULT_FACTORS


def build_prompt(snapshot: InsightSnapshot) -> str:
    """
    Build the analysis prompt.

    Includes the 30 most recent sales (with their net profit), every
    commission and the 10 most recent expenses.
    """
    recent_sales = sorted(snapshot.sales, key=lambda s: s.date)[-MAX_SALES:]
    recent_expenses = sorted(snapshot.expenses, key=lambda e: e.date)[-MAX_EXPENSES:]

    sales_lines = "\n".join(
        f"Data:{s.date.isoformat()},Qtd:{s.quantity},"
        f"LucroLíq:{compute_sale_metrics(s, snapshot.factors).net_profit}"
        for s in recent_sales
    )
    commission_lines = "\n".join(
        f"Período:{c.month.value} {c.year},Operadora:{c.operator.value},"
        f"Valor:{c.commission_value}"
        for c in snapshot.commissions
    )
    expense_lines = "\n".join(
        f"Categoria:{e.category},Valor:{e.value}" for e in recent_expenses
    )

    return (
        "Age como um analista financeiro sénior especializado no mercado "
        "moçambicano.\n\n"
        "CONTEXTO DE DADOS:\n"
        f"- Vendas Recentes:\n{sales_lines}\n\n"
        f"- Comissões Recebidas:\n{commission_lines}\n\n"
        f"- Despesas Fixas:\n{expense_lines}\n\n"
        "OBJETIVO:\n"
        "Fornece uma análise executiva concisa (máx. 200 palavras) em Português "
        "de Moçambique.\n"
        "1. Identifica o dia mais produtivo e explica a razão do seu destaque.\n"
        "2. Determina se a tendência de volume de vendas está a Crescer, Estável "
        "ou a Declinar.\n"
        "3. Compara a eficiência do M-Pesa vs e-Mola com base nos ganhos "
        "recentes.\n"
        "4. Dá UMA recomendação estratégica de alto impacto para maximizar o "
        "Lucro Real ou cortar custos desnecessários.\n\n"
        "Tom: Profissional, direto ao ponto e baseado em dados."
    )


def generate_insights(
    snapshot: InsightSnapshot,
    api_key: str,
    model: str = "gemini-1.5-pro",
) -> str:
    """Ask Gemini for a short executive analysis of the records."""
    if not api_key:
        return MISSING_KEY_MESSAGE

    prompt = build_prompt(snapshot)
    try:
        genai.configure(api_key=api_key)
        m = genai.GenerativeModel(model_name=model)
        response = m.generate_content(prompt)
        text = response.text
    except Exception:  # noqa: BLE001
        logger.exception("Gemini request failed (model=%s)", model)
        return FAILURE_MESSAGE

    if not text:
        logger.warning("Gemini returned an empty response (model=%s)", model)
        return EMPTY_RESPONSE_MESSAGE
    return text
