from __future__ import annotations

from typing import Dict, List

import pytest


@pytest.fixture()
def lead_rows() -> List[Dict[str, str]]:
    return [
        {
            "Nome": "Maria da Silva",
            "Celular": "(11) 98765-4321",
            "Telefone": "",
            "Data da Conversão": "2024-01-15 10:00:00 -0300",
            "Identificador": "formulario-home",
        },
        {
            "Nome": "JOÃO PEREIRA",
            "Celular": "",
            "Telefone": "62 98222-1100",
            "Data da Conversão": "2024-01-20T08:30:00",
            "Identificador": "site-contato",
        },
        {
            "Nome": "Ana",
            "Celular": "5511987654321",
            "Telefone": "",
            "Data da Conversão": "2024-02-02 12:00:00",
            "Identificador": "organico",
        },
        {
            "Nome": "",
            "Celular": "00000000000",
            "Telefone": "",
            "Data da Conversão": "data inválida",
            "Identificador": "Formulario-Blog",
        },
        {
            "Nome": "Sem Telefone",
            "Celular": "  ",
            "Telefone": "",
            "Data da Conversão": "",
            "Identificador": "site-landing",
        },
    ]
