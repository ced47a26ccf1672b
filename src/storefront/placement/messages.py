"""User-facing messages for order placement, per locale.

French is the storefront's default language. Every outcome code and every
field rule has an entry in each catalog; lookups for an unknown locale fall
back to the default catalog.
"""

from storefront.placement.outcome import ORDER_CREATED, OrderErrorCode

DEFAULT_LOCALE = "fr"

_OUTCOMES = {
    "fr": {
        ORDER_CREATED: "Votre commande a été enregistrée avec succès.",
        OrderErrorCode.RATE_LIMITED: "Trop de tentatives de commande. Veuillez réessayer plus tard.",
        OrderErrorCode.SANITIZATION_FAILED: "Certaines informations contiennent des caractères non autorisés.",
        OrderErrorCode.VALIDATION_FAILED: "Certaines informations sont invalides. Veuillez vérifier le formulaire.",
        OrderErrorCode.BUSINESS_RULES_FAILED: "Les informations de paiement semblent incorrectes. Veuillez les vérifier.",
        OrderErrorCode.SAFETY_CHECK_FAILED: "Votre commande n'a pas pu être traitée pour des raisons de sécurité.",
        OrderErrorCode.APPLICATION_NOT_FOUND: "Cette application n'est plus disponible.",
        OrderErrorCode.PLATFORM_NOT_FOUND: "Ce moyen de paiement n'est plus disponible.",
        OrderErrorCode.PRICE_MISMATCH: "Le prix de l'application a changé. Veuillez actualiser la page.",
        OrderErrorCode.DUPLICATE_ORDER: "Vous avez déjà commandé cette application récemment.",
        OrderErrorCode.INSERT_FAILED: "Votre commande n'a pas pu être enregistrée. Veuillez réessayer.",
        OrderErrorCode.DATABASE_ERROR: "Le service est momentanément indisponible. Veuillez réessayer.",
        OrderErrorCode.UNKNOWN_ERROR: "Une erreur inattendue est survenue. Veuillez réessayer.",
    },
    "en": {
        ORDER_CREATED: "Your order has been placed successfully.",
        OrderErrorCode.RATE_LIMITED: "Too many order attempts. Please try again later.",
        OrderErrorCode.SANITIZATION_FAILED: "Some of the information contains characters that are not allowed.",
        OrderErrorCode.VALIDATION_FAILED: "Some of the information is invalid. Please check the form.",
        OrderErrorCode.BUSINESS_RULES_FAILED: "The payment details look incorrect. Please check them.",
        OrderErrorCode.SAFETY_CHECK_FAILED: "Your order could not be processed for security reasons.",
        OrderErrorCode.APPLICATION_NOT_FOUND: "This application is no longer available.",
        OrderErrorCode.PLATFORM_NOT_FOUND: "This payment method is no longer available.",
        OrderErrorCode.PRICE_MISMATCH: "The application's price has changed. Please refresh the page.",
        OrderErrorCode.DUPLICATE_ORDER: "You have already ordered this application recently.",
        OrderErrorCode.INSERT_FAILED: "Your order could not be saved. Please try again.",
        OrderErrorCode.DATABASE_ERROR: "The service is temporarily unavailable. Please try again.",
        OrderErrorCode.UNKNOWN_ERROR: "An unexpected error occurred. Please try again.",
    },
}

_FIELD_RULES = {
    "fr": {
        "required": "Ce champ est requis.",
        "too_short": "Doit contenir au moins {min} caractères.",
        "too_long": "Ne doit pas dépasser {max} caractères.",
        "unsafe_content": "Contient des caractères ou du contenu non autorisés.",
        "name_invalid_chars": "Ne peut contenir que des lettres, espaces, tirets, apostrophes et points.",
        "name_has_digits": "Ne doit pas contenir de chiffres.",
        "name_too_many_specials": "Contient trop de caractères spéciaux.",
        "email_invalid": "Adresse e-mail invalide.",
        "email_domain_invalid": "Le domaine de l'adresse e-mail est invalide.",
        "email_disposable": "Les adresses e-mail temporaires ne sont pas acceptées.",
        "phone_invalid": "Le numéro de téléphone doit contenir entre 8 et 15 chiffres.",
        "id_invalid": "Identifiant invalide.",
        "account_name_invalid": "Le nom du compte contient des caractères non autorisés.",
        "account_name_digits_only": "Le nom du compte ne peut pas contenir uniquement des chiffres.",
        "account_name_repeated_specials": "Le nom du compte contient trop de caractères spéciaux consécutifs.",
        "account_number_invalid": "Le numéro de compte contient des caractères non autorisés.",
        "account_number_no_alnum": "Le numéro de compte doit contenir au moins une lettre ou un chiffre.",
        "fee_invalid": "Le montant est invalide.",
        "fee_not_positive": "Le montant doit être un entier positif.",
        "fee_too_large": "Le montant dépasse la limite autorisée.",
        "placeholder_account_name": "Veuillez indiquer le vrai nom du titulaire du compte.",
        "placeholder_customer_name": "Veuillez indiquer votre vrai nom.",
        "sequential_account_number": "Ce numéro de compte ne semble pas valide.",
        "account_name_is_contact_detail": "Le nom du compte ne peut pas être votre e-mail ou votre téléphone.",
    },
    "en": {
        "required": "This field is required.",
        "too_short": "Must be at least {min} characters.",
        "too_long": "Must be at most {max} characters.",
        "unsafe_content": "Contains characters or content that are not allowed.",
        "name_invalid_chars": "May only contain letters, spaces, hyphens, apostrophes and periods.",
        "name_has_digits": "Must not contain digits.",
        "name_too_many_specials": "Contains too many special characters.",
        "email_invalid": "Invalid email address.",
        "email_domain_invalid": "The email domain is invalid.",
        "email_disposable": "Temporary email addresses are not accepted.",
        "phone_invalid": "The phone number must have between 8 and 15 digits.",
        "id_invalid": "Invalid identifier.",
        "account_name_invalid": "The account name contains characters that are not allowed.",
        "account_name_digits_only": "The account name cannot be digits only.",
        "account_name_repeated_specials": "The account name has too many consecutive special characters.",
        "account_number_invalid": "The account number contains characters that are not allowed.",
        "account_number_no_alnum": "The account number must contain at least one letter or digit.",
        "fee_invalid": "The amount is invalid.",
        "fee_not_positive": "The amount must be a positive whole number.",
        "fee_too_large": "The amount exceeds the allowed limit.",
        "placeholder_account_name": "Please enter the real account holder name.",
        "placeholder_customer_name": "Please enter your real name.",
        "sequential_account_number": "This account number does not look valid.",
        "account_name_is_contact_detail": "The account name cannot be your email or phone number.",
    },
}

SUPPORTED_LOCALES = tuple(_OUTCOMES)


def resolve_locale(locale: str | None, default: str = DEFAULT_LOCALE) -> str:
    """Pick a supported catalog from a locale tag such as ``en-US`` or an Accept-Language value."""
    if default not in _OUTCOMES:
        default = DEFAULT_LOCALE
    if not locale:
        return default
    for candidate in locale.split(","):
        language = candidate.split(";")[0].strip().lower().replace("_", "-").split("-")[0]
        if language in _OUTCOMES:
            return language
    return default


def message_for(code, locale: str | None = None) -> str:
    catalog = _OUTCOMES[resolve_locale(locale)]
    return catalog.get(code) or _OUTCOMES[DEFAULT_LOCALE][code]


def field_message(rule: str, locale: str | None = None, **params) -> str:
    catalog = _FIELD_RULES[resolve_locale(locale)]
    template = catalog.get(rule) or _FIELD_RULES[DEFAULT_LOCALE][rule]
    return template.format(**params)


def field_rules() -> frozenset[str]:
    return frozenset(_FIELD_RULES[DEFAULT_LOCALE])
