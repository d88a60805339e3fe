# =======================================================================================
# doorcheck/services/code_classifier.py - Scanned Code Classification
# =======================================================================================
from ..models.enums import ResolutionMethod
from ..utils.validators import is_digits_only


def classify_code(code: str) -> ResolutionMethod:
    """
    Numeric codes are legacy Wally barcodes; anything else is treated as an
    LV card QR secret. Format sniff only.
    """
    if is_digits_only(code):
        return ResolutionMethod.WALLY_BARCODE
    return ResolutionMethod.LV_QR
