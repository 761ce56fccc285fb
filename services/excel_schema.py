"""
Expected layout of the lead workbook.

Sheet and column names are matched case- and accent-insensitively, so the
values here are the canonical spellings only.
"""


class Sheets:
    BASE = 'BASE'
    MERCADO = 'MERCADO'
    ORIGEM = 'ORIGEM'
    LOCAL = 'LOCAL'
    PORTE = 'PORTE'
    OBJETIVO = 'OBJETIVO'



class Columns:
    # Key column present in every sheet
    LEAD_ID = 'LEAD_ID'

    # BASE
    DATA_CADASTRO = 'DATA CADASTRO'
    VENDIDO = 'VENDIDO'

    # MERCADO (also optional in BASE)
    MERCADO = 'MERCADO'

    # ORIGEM
    ORIGEM = 'ORIGEM'
    SUB_ORIGEM = 'SUB-ORIGEM'

    LOCAL = 'LOCAL'
    PORTE = 'PORTE'
    OBJETIVO = 'OBJETIVO'


class FactKinds:
    """Names used for dimensional fact batches."""
    MARKET = 'market'
    SOURCE = 'source'
    LOCATION = 'location'
    SIZE = 'size'
    OBJECTIVE = 'objective'

    ALL = (MARKET, SOURCE, LOCATION, SIZE, OBJECTIVE)
