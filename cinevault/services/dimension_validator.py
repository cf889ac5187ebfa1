"""
Validation des dimensions physiques des images candidates.

Deux verifications, dans cet ordre :
- Taille minimale : chaque dimension doit atteindre 90% du minimum du type
- Ratio d'aspect : |largeur/hauteur - cible| <= cible * tolerance (bornes incluses)

Un echec n'est jamais une exception : le candidat est simplement ecarte du
classement, avec le motif du rejet.
"""

from typing import Optional

from cinevault.core.value_objects import AssetTypeSpec, ValidationResult

# Tolerance appliquee au minimum de taille (90% du minimum accepte)
MIN_SIZE_FACTOR = 0.9

# Absorbe les erreurs d'arrondi des flottants aux bornes exactes
_EPSILON = 1e-9


def validate_dimensions(
    width: Optional[int],
    height: Optional[int],
    spec: AssetTypeSpec,
) -> ValidationResult:
    """
    Verifie des dimensions d'image contre la specification d'un type.

    Args :
        width : Largeur en pixels (None si inconnue)
        height : Hauteur en pixels (None si inconnue)
        spec : Specification du type d'asset

    Retourne :
        ValidationResult(valid=True) ou ValidationResult(valid=False, reason=...)
    """
    if not width or not height or width <= 0 or height <= 0:
        return ValidationResult(False, f"Dimensions invalides : {width}x{height}")

    if spec.min_dimensions is not None:
        min_width = spec.min_dimensions.width * MIN_SIZE_FACTOR
        min_height = spec.min_dimensions.height * MIN_SIZE_FACTOR
        if width + _EPSILON < min_width or height + _EPSILON < min_height:
            return ValidationResult(
                False,
                f"Trop petit : {width}x{height} "
                f"(minimum {spec.min_dimensions} a {MIN_SIZE_FACTOR:.0%})",
            )

    if spec.aspect_ratio is not None:
        ratio = width / height
        target = spec.aspect_ratio.target
        if abs(ratio - target) > spec.aspect_ratio.tolerance_range + _EPSILON:
            return ValidationResult(
                False,
                f"Ratio incorrect : {ratio:.3f} "
                f"(attendu {target:.3f} +/- {spec.aspect_ratio.tolerance:.0%})",
            )

    return ValidationResult(True)
