"""Keyword heuristics for the categorization engine.

``KEYWORD_RULES`` is an ordered priority list: when a description contains
tokens of several categories, the rule listed first wins. Tokens are matched
as substrings of the cleaned, uppercased description.
"""

from typing import Optional, Sequence

KeywordRules = Sequence[tuple[str, tuple[str, ...]]]

KEYWORD_CONFIDENCE = 0.95

KEYWORD_RULES: KeywordRules = (
    (
        "Assinaturas",
        (
            "NETFLIX",
            "SPOTIFY",
            "DISNEY",
            "HBO",
            "PRIME VIDEO",
            "AMAZON PRIME",
            "YOUTUBE PREMIUM",
            "DEEZER",
            "APPLE.COM",
            "ICLOUD",
            "GOOGLE ONE",
            "CHATGPT",
            "OPENAI",
        ),
    ),
    (
        "Transporte",
        (
            "UBER",
            "99APP",
            "99 TAXI",
            "CABIFY",
            "POSTO",
            "IPIRANGA",
            "SHELL",
            "ESTACIONAMENTO",
            "SEM PARAR",
            "CONECTCAR",
            "METRO",
            "LATAM",
            "GOL LINHAS",
            "AZUL LINHAS",
        ),
    ),
    (
        "Alimentação",
        (
            "IFOOD",
            "RAPPI",
            "SUPERMERCADO",
            "PADARIA",
            "RESTAURANTE",
            "LANCHONETE",
            "MCDONALDS",
            "BURGER KING",
            "CARREFOUR",
            "ASSAI",
            "ATACADAO",
            "PAO DE ACUCAR",
        ),
    ),
    (
        "Saúde",
        (
            "FARMACIA",
            "DROGARIA",
            "DROGASIL",
            "RAIA",
            "PAGUE MENOS",
            "HOSPITAL",
            "CLINICA",
            "LABORATORIO",
            "UNIMED",
            "AMIL",
        ),
    ),
    (
        "Educação",
        ("ESCOLA", "FACULDADE", "UNIVERSIDADE", "UDEMY", "ALURA", "COURSERA", "LIVRARIA"),
    ),
    (
        "Moradia",
        (
            "ALUGUEL",
            "CONDOMINIO",
            "ENEL",
            "CEMIG",
            "LIGHT",
            "SABESP",
            "COPASA",
            "COMGAS",
            "VIVO",
            "CLARO",
            "TIM ",
        ),
    ),
    ("Investimentos", ("CDB", "TESOURO", "CORRETORA", "XP INVEST", "RENDIMENTO")),
    ("Taxas", ("TARIFA", "ANUIDADE", "IOF", "JUROS", "MULTA", "ENCARGO")),
    ("Receita", ("SALARIO", "PIX RECEBIDO", "TED RECEBIDA", "REEMBOLSO", "ESTORNO")),
    ("Lazer", ("CINEMA", "INGRESSO", "SYMPLA", "TEATRO", "STEAM", "PLAYSTATION", "BAR ")),
    ("Compras", ("AMAZON", "MERCADOLIVRE", "MERCADO LIVRE", "SHOPEE", "MAGALU", "AMERICANAS", "SHEIN")),
)


def match_keyword(description_clean: str, rules: KeywordRules = KEYWORD_RULES) -> Optional[str]:
    """Return the first category name whose tokens occur in the description."""
    haystack = description_clean.upper()
    for category_name, tokens in rules:
        if any(token in haystack for token in tokens):
            return category_name
    return None
