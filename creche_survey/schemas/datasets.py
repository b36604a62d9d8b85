from typing import List, Set

# Sentinels used when a field cannot be resolved from a row
UNIDENTIFIED_FACILITY = "Non identifié"
UNSPECIFIED = "Non spécifié"
UNSPECIFIED_PERIOD = "Non spécifiée"
OTHER_MANAGERS = "Autres ou vides"

# Exact header labels of the survey export
FACILITY_HEADER = "Selectionnez votre établissement :"
FACILITY_PLACEHOLDER = "Sélectionnez votre établissement :"
GENDER_HEADER = "Vous êtes ?"
AGE_HEADER = "Votre âge ?"
CSP_HEADER = "Quelle est votre catégorie socio-professionnelle ?"
SATISFACTION_HEADER = "Je suis satisfait.e de l'accueil de mon enfant à la crèche ?"
FOLLOW_UP_PREFIX = "Si non, pourquoi ?"

# Known managers, in display order
MANAGER_NAMES: List[str] = [
    "Ville de Strasbourg",
    "AASBR [AASBR]",
    "AGES",
    "AGF",
    "ALEF",
    "Fondation d'Auteuil",
    "Fossé des treize",
    "APEDI",
]

# Accent-folded, lowercased headers recognised as the submission date
DATE_HEADERS: Set[str] = {
    "date",
    "horodateur",
    "timestamp",
    "date de soumission",
    "date de reponse",
}

# Cell values meaning "no answer"
NO_ANSWER_VALUES: Set[str] = {"sans réponse", "n/a"}

# Checkbox cells that do not select their option
UNCHECKED_VALUES: Set[str] = {"non", "sans réponse", "n/a"}

# Header keywords of the facility/manager lookup file
LOOKUP_FACILITY_KEYWORDS: List[str] = ["etablissement", "établissement", "creche", "crèche", "nom"]
LOOKUP_MANAGER_KEYWORDS: List[str] = ["gestionnaire", "partenaire", "operateur"]
LOOKUP_TEMPLATE_HEADERS: List[str] = ["Etablissement", "Gestionnaire"]

EXPORT_REQUIRED_KEYS: Set[str] = {"etablissements", "rawResponses"}


def required_lookup_columns() -> List[str]:
    return list(LOOKUP_TEMPLATE_HEADERS)


def required_export_keys() -> List[str]:
    return sorted(EXPORT_REQUIRED_KEYS)
