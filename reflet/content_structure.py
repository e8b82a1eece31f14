from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class ContentKind(str, Enum):
    text = "text"
    rich_text = "rich_text"
    image = "image"


@dataclass(frozen=True)
class ContentField:
    key: str
    label: str
    kind: ContentKind = ContentKind.text
    # compiled-in fallback; image defaults are static asset paths
    default_value: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "key": self.key,
            "label": self.label,
            "kind": self.kind.value,
            "default_value": self.default_value,
        }


@dataclass(frozen=True)
class ContentSection:
    label: str
    fields: Tuple[ContentField, ...] = ()

    def field(self, key: str) -> Optional[ContentField]:
        for f in self.fields:
            if f.key == key:
                return f
        return None


@dataclass(frozen=True)
class PageDef:
    label: str
    # insertion order is the display order in the editor
    sections: Dict[str, ContentSection] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "sections": {
                key: {"label": s.label, "fields": [f.to_dict() for f in s.fields]}
                for key, s in self.sections.items()
            },
        }


TEXT = ContentKind.text
RICH = ContentKind.rich_text
IMAGE = ContentKind.image

HERO_AGRICULTURE_IMAGE = "/static/img/hero-agriculture.jpg"
FARMER_WOMAN_IMAGE = "/static/img/farmer-woman.jpg"
RESTAURANT_IMAGE = "/static/img/restaurant.jpg"
CULTURAL_DANCE_IMAGE = "/static/img/cultural-dance.jpg"


def _section(label: str, *fields: ContentField) -> ContentSection:
    return ContentSection(label=label, fields=tuple(fields))


PAGE_CONTENT_STRUCTURE: Dict[str, PageDef] = {
    "accueil": PageDef(
        label="Accueil",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("badge", "Badge", TEXT, "Association Loi 1901"),
                ContentField("title", "Titre", TEXT, "Ensemble, cultivons"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "l'avenir du Gabon"),
                ContentField(
                    "subtitle", "Sous-titre", TEXT,
                    "Reflet du Gabon œuvre pour l'autonomie alimentaire, la valorisation culturelle "
                    "et l'insertion professionnelle des jeunes et des femmes au Gabon.",
                ),
                ContentField("image", "Image de fond", IMAGE, HERO_AGRICULTURE_IMAGE),
                ContentField("stat1_value", "Stat 1 - Valeur", TEXT, "500+"),
                ContentField("stat1_label", "Stat 1 - Label", TEXT, "Bénéficiaires"),
                ContentField("stat2_value", "Stat 2 - Valeur", TEXT, "3"),
                ContentField("stat2_label", "Stat 2 - Label", TEXT, "Piliers d'action"),
                ContentField("stat3_value", "Stat 3 - Valeur", TEXT, "2018"),
                ContentField("stat3_label", "Stat 3 - Label", TEXT, "Année de création"),
            ),
            "mission": _section(
                "Section Mission",
                ContentField("badge", "Badge", TEXT, "Notre Mission"),
                ContentField("title", "Titre", TEXT, "Un engagement pour"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "un Gabon durable"),
                ContentField(
                    "description", "Description", RICH,
                    "Reflet du Gabon est une association loi 1901 qui agit pour l'autonomie alimentaire, "
                    "la valorisation culturelle et l'insertion professionnelle des jeunes et des femmes au Gabon.",
                ),
                ContentField("image", "Image", IMAGE, FARMER_WOMAN_IMAGE),
                ContentField("floating_value", "Carte flottante - Valeur", TEXT, "15+"),
                ContentField("floating_text", "Carte flottante - Texte", TEXT, "Années d'engagement"),
            ),
            "pillars": _section(
                "Nos 3 Piliers",
                ContentField("badge", "Badge", TEXT, "Nos 3 Piliers"),
                ContentField("title", "Titre", TEXT, "Les Moyens de Notre Action"),
                ContentField(
                    "description", "Description", TEXT,
                    "Trois initiatives complémentaires pour construire un avenir durable et solidaire "
                    "entre la France et le Gabon.",
                ),
                ContentField("pillar1_title", "Pilier 1 - Titre", TEXT, "Coopérative Agricole"),
                ContentField("pillar1_subtitle", "Pilier 1 - Sous-titre", TEXT, "Nkoltang, Gabon"),
                ContentField(
                    "pillar1_description", "Pilier 1 - Description", TEXT,
                    "Formation et accompagnement des jeunes et des femmes dans l'agriculture durable. "
                    "Lutte contre la faim et la pauvreté en zone rurale.",
                ),
                ContentField("pillar1_image", "Pilier 1 - Image", IMAGE, FARMER_WOMAN_IMAGE),
                ContentField("pillar2_title", "Pilier 2 - Titre", TEXT, "Les Délices du Gabon"),
                ContentField("pillar2_subtitle", "Pilier 2 - Sous-titre", TEXT, "Restaurant Associatif"),
                ContentField(
                    "pillar2_description", "Pilier 2 - Description", TEXT,
                    "Gastronomie africaine authentique en Normandie. Finaliste du prix 'Cuistos Engagés' "
                    "pour notre approche écoresponsable.",
                ),
                ContentField("pillar2_image", "Pilier 2 - Image", IMAGE, RESTAURANT_IMAGE),
                ContentField("pillar3_title", "Pilier 3 - Titre", TEXT, "Groupe Culturel"),
                ContentField("pillar3_subtitle", "Pilier 3 - Sous-titre", TEXT, "Ambassadeurs Culturels"),
                ContentField(
                    "pillar3_description", "Pilier 3 - Description", TEXT,
                    "Valorisation de la culture gabonaise à travers les danses traditionnelles, "
                    "la musique et les animations culturelles.",
                ),
                ContentField("pillar3_image", "Pilier 3 - Image", IMAGE, CULTURAL_DANCE_IMAGE),
            ),
            "impact": _section(
                "Section Impact",
                ContentField("title", "Titre", TEXT, "Notre Impact en Chiffres"),
                ContentField("description", "Description", TEXT, "Des résultats concrets qui témoignent de notre engagement"),
                ContentField("stat1_value", "Stat 1 - Valeur", TEXT, "500+"),
                ContentField("stat1_label", "Stat 1 - Label", TEXT, "Femmes formées"),
                ContentField("stat2_value", "Stat 2 - Valeur", TEXT, "50"),
                ContentField("stat2_label", "Stat 2 - Label", TEXT, "Hectares cultivés"),
                ContentField("stat3_value", "Stat 3 - Valeur", TEXT, "1000+"),
                ContentField("stat3_label", "Stat 3 - Label", TEXT, "Repas servis"),
                ContentField("stat4_value", "Stat 4 - Valeur", TEXT, "20+"),
                ContentField("stat4_label", "Stat 4 - Label", TEXT, "Événements culturels"),
            ),
            "cta": _section(
                "Section Appel à l'action",
                ContentField("title", "Titre", TEXT, "Rejoignez notre mission"),
                ContentField(
                    "description", "Description", TEXT,
                    "Chaque geste compte. Ensemble, construisons un avenir meilleur pour le Gabon.",
                ),
            ),
        },
    ),
    "moyens": PageDef(
        label="Nos Moyens",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("title", "Titre", TEXT, "Trois Piliers pour un"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Impact Durable"),
                ContentField(
                    "description", "Description", TEXT,
                    "Découvrez les moyens concrets par lesquels notre association œuvre pour "
                    "l'autonomisation des communautés gabonaises.",
                ),
            ),
            "cooperative": _section(
                "Section Coopérative",
                ContentField("title", "Titre", TEXT, "Coopérative Agricole à Nkoltang"),
                ContentField("description", "Description", RICH),
                ContentField("image", "Image", IMAGE, FARMER_WOMAN_IMAGE),
            ),
            "restaurant": _section(
                "Section Restaurant",
                ContentField("title", "Titre", TEXT, "Restaurant \"Les Délices du Gabon\""),
                ContentField("description", "Description", RICH),
                ContentField("image", "Image", IMAGE, RESTAURANT_IMAGE),
            ),
            "culture": _section(
                "Section Culture",
                ContentField("title", "Titre", TEXT, "Groupe Culturel"),
                ContentField("description", "Description", RICH),
                ContentField("image", "Image", IMAGE, CULTURAL_DANCE_IMAGE),
            ),
        },
    ),
    "cooperative": PageDef(
        label="Coopérative",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("title", "Titre", TEXT, "Coopérative Agricole de Nkoltang"),
                ContentField("subtitle", "Sous-titre", TEXT, "Agriculture durable pour l'autonomisation des femmes gabonaises."),
                ContentField("image", "Image de fond", IMAGE, HERO_AGRICULTURE_IMAGE),
            ),
            "stats": _section(
                "Statistiques",
                ContentField("stat1_value", "Stat 1 - Valeur", TEXT, "10"),
                ContentField("stat1_label", "Stat 1 - Label", TEXT, "Hectares Cultivés"),
                ContentField("stat2_value", "Stat 2 - Valeur", TEXT, "200+"),
                ContentField("stat2_label", "Stat 2 - Label", TEXT, "Femmes Formées"),
                ContentField("stat3_value", "Stat 3 - Valeur", TEXT, "30 km"),
                ContentField("stat3_label", "Stat 3 - Label", TEXT, "De Libreville"),
                ContentField("stat4_value", "Stat 4 - Valeur", TEXT, "15+"),
                ContentField("stat4_label", "Stat 4 - Label", TEXT, "Cultures Différentes"),
            ),
            "about": _section(
                "Section À propos",
                ContentField("title", "Titre", TEXT, "Transformer des Vies par l'Agriculture"),
                ContentField("description", "Description", RICH),
            ),
            "activities": _section(
                "Activités",
                ContentField("title", "Titre de la section", TEXT, "Nos Activités"),
                ContentField(
                    "description", "Description", TEXT,
                    "De la formation à la production, nous couvrons toute la chaîne de valeur agricole.",
                ),
            ),
            "cta": _section(
                "Section CTA",
                ContentField("title", "Titre", TEXT, "Soutenez Notre Coopérative"),
                ContentField(
                    "description", "Description", TEXT,
                    "Votre soutien permet de former plus de femmes, d'acquérir du matériel agricole "
                    "et de développer nos activités pour un impact encore plus grand.",
                ),
            ),
        },
    ),
    "culture": PageDef(
        label="Culture",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("title", "Titre", TEXT, "Groupe Culturel Gabonais"),
                ContentField("subtitle", "Sous-titre", TEXT, "Valorisation de la culture gabonaise à travers les arts traditionnels."),
                ContentField("image", "Image de fond", IMAGE, CULTURAL_DANCE_IMAGE),
            ),
            "mission": _section(
                "Mission Culturelle",
                ContentField("title", "Titre", TEXT, "Notre Mission Culturelle"),
                ContentField("description", "Description", RICH),
            ),
            "prestations": _section(
                "Prestations",
                ContentField("title", "Titre", TEXT, "Nos Prestations"),
                ContentField("description", "Description", TEXT, "Une gamme complète de services culturels pour tous vos événements."),
            ),
            "cta": _section(
                "Section CTA",
                ContentField("title", "Titre", TEXT, "Réservez Notre Groupe"),
                ContentField(
                    "description", "Description", TEXT,
                    "Vous organisez un événement ? Notre groupe culturel apportera une touche "
                    "d'authenticité africaine mémorable à votre célébration.",
                ),
            ),
        },
    ),
    "projets": PageDef(
        label="Projets",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("title", "Titre", TEXT, "Activités et"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Projets Récents"),
                ContentField(
                    "description", "Description", TEXT,
                    "Suivez nos actualités et découvrez l'impact concret de nos actions sur le terrain "
                    "au Gabon et en France.",
                ),
            ),
            "cta": _section(
                "Section CTA",
                ContentField("text", "Texte", TEXT, "Vous souhaitez contribuer à nos prochains projets ?"),
            ),
        },
    ),
    "boutique": PageDef(
        label="Boutique",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("badge", "Badge", TEXT, "Boutique Express"),
                ContentField("title", "Titre", TEXT, "Artisanat"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Gabonais"),
                ContentField(
                    "description", "Description", TEXT,
                    "Découvrez notre sélection de produits artisanaux authentiques et offrez des bons "
                    "cadeaux pour le restaurant \"Les Délices du Gabon\".",
                ),
            ),
            "gift_cards": _section(
                "Bons Cadeaux",
                ContentField("title", "Titre", TEXT, "Offrez une Expérience Culinaire"),
                ContentField(
                    "description", "Description", TEXT,
                    "Nos bons cadeaux vous permettent d'offrir un moment de découverte gastronomique "
                    "au restaurant \"Les Délices du Gabon\".",
                ),
            ),
        },
    ),
    "galerie": PageDef(
        label="Galerie",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("badge", "Badge", TEXT, "Galerie Photos"),
                ContentField("title", "Titre", TEXT, "Nos"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Moments"),
                ContentField("title_suffix", "Titre (suite)", TEXT, "en Images"),
                ContentField(
                    "description", "Description", TEXT,
                    "Découvrez en images nos activités agricoles à Nkoltang, nos événements culturels "
                    "et l'ambiance du restaurant \"Les Délices du Gabon\".",
                ),
            ),
        },
    ),
    "contact": PageDef(
        label="Contact",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("title", "Titre", TEXT, "Parlons de Votre"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Engagement"),
                ContentField(
                    "description", "Description", TEXT,
                    "Une question, une idée de partenariat ou envie de nous rejoindre ? "
                    "Notre équipe est à votre écoute.",
                ),
            ),
            "info": _section(
                "Informations",
                ContentField("address", "Adresse", TEXT, "Verneuil-sur-Avre, Normandie, France"),
                ContentField("phone", "Téléphone", TEXT, "+33 6 81 65 78 70"),
                ContentField("email", "Email", TEXT, "assorefletdugabon@yahoo.com"),
            ),
        },
    ),
    "presidente": PageDef(
        label="Présidente",
        sections={
            "hero": _section(
                "Section Héro",
                ContentField("badge", "Badge", TEXT, "Message de la Direction"),
                ContentField("title", "Titre", TEXT, "Le Mot de la"),
                ContentField("title_highlight", "Titre (partie colorée)", TEXT, "Présidente"),
            ),
            "message": _section(
                "Message de la Présidente",
                ContentField("content", "Contenu du message", RICH),
            ),
            "signature": _section(
                "Signature",
                ContentField("closing", "Formule de conclusion", TEXT, "Avec toute ma gratitude et mon engagement,"),
                ContentField("name", "Nom", TEXT, "Annie Pichon"),
                ContentField("title", "Titre / Fonction", TEXT, "Présidente de Reflet du Gabon"),
            ),
            "cta": _section(
                "Appel à l'action",
                ContentField("text", "Texte", TEXT, "Vous souhaitez nous rejoindre dans cette aventure ?"),
            ),
        },
    ),
}


def get_page(page: str) -> Optional[PageDef]:
    return PAGE_CONTENT_STRUCTURE.get(page)


def get_field(page: str, section: str, key: str) -> Optional[ContentField]:
    page_def = PAGE_CONTENT_STRUCTURE.get(page)
    if page_def is None:
        return None
    section_def = page_def.sections.get(section)
    if section_def is None:
        return None
    return section_def.field(key)


def default_for(page: str, section: str, key: str) -> str:
    f = get_field(page, section, key)
    return f.default_value if f is not None else ""


def iter_fields(page: str) -> Iterator[Tuple[str, ContentField]]:
    """Yields (section_key, field) in editor order; nothing for unknown pages."""
    page_def = PAGE_CONTENT_STRUCTURE.get(page)
    if page_def is None:
        return
    for section_key, section in page_def.sections.items():
        for f in section.fields:
            yield section_key, f


def page_keys() -> List[str]:
    return list(PAGE_CONTENT_STRUCTURE.keys())
