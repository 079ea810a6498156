"""
Postal code (CEP) lookup through ViaCEP, used to prefill the address step.
"""

from typing import Dict, Optional

import requests

from config.app_config import LookupConfig, get_config
from utils.logging_config import get_logger
from utils.validators import CEP_LENGTH, only_digits

logger = get_logger(__name__)


def lookup_postal_code(cep: str, config: Optional[LookupConfig] = None) -> Optional[Dict[str, str]]:
    """
    Fetch street, neighborhood, city and state for a CEP

    Returns:
        The address fields, or None for incomplete/unknown CEPs and lookup failures
    """
    digits = only_digits(cep)
    if len(digits) != CEP_LENGTH:
        return None

    config = config or get_config().lookup
    try:
        response = requests.get(config.postal_code_url.format(cep=digits), timeout=config.timeout_seconds)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error fetching CEP {digits}: {e}")
        return None

    if data.get("erro"):
        logger.info(f"CEP not found: {digits}")
        return None

    return {
        "street": data.get("logradouro", ""),
        "neighborhood": data.get("bairro", ""),
        "city": data.get("localidade", ""),
        "state": data.get("uf", ""),
    }
