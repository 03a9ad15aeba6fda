"""Registry of URL filter pattern presets."""


from pydantic import BaseModel


class FilterPatternSet(BaseModel):
    """Regex sets that decide which discovered links are worth keeping.

    All patterns are matched case-insensitively with ``re.search``.
    """

    name: str
    description: str

    exclude_patterns: list[str] = []
    include_patterns: list[str] = []
    priority_patterns: list[str] = []


MENU_PATTERN = FilterPatternSet(
    name="menu",
    description="Restaurant menu (carta) pages, English and Spanish vocabulary",
    exclude_patterns=[
        # Files
        r"\.(jpg|jpeg|png|gif|svg|webp|ico|pdf|doc|docx|xls|xlsx|zip|rar|exe|dmg)$",
        # WordPress
        r"/(wp-|wp/|wordpress/|wp-content|wp-includes)",
        # Blog taxonomy
        r"/(tag|tags|category|categories|author|search|page|comments)",
        r"/(login|register|signup|signin|auth|account|profile|dashboard)",
        r"/(privacy|privacidad|cookies|terms|terminos|condiciones|legal|aviso-legal)",
        # Info pages
        r"/(contact|contacto|about|sobre-nosotros|quienes-somos|historia)",
        r"/(blog|news|noticias|articulos|articles|press|prensa)",
        # Shop and cart, without catching /carta
        r"/(shop|tienda|store|carrito|checkout|compra)(?:/|$)",
        r"/(faq|faqs|help|ayuda|soporte|support)",
        r"/(events|eventos|calendar|calendario)",
        r"/(gallery|galeria|photos|fotos|videos|imagenes)",
        r"/(social|facebook|twitter|instagram|linkedin|youtube)",
        r"/(rss|feed|atom|sitemap|robots\.txt)",
        r"/(api|json|xml|graphql|webhook)",
        r"/(ads|advertising|publicidad|banner)",
        r"/(tracking|analytics|pixel)",
        r"/(careers|jobs|empleo|trabajo)",
        r"/(download|descargar|upload|subir)",
        r"/(subscribe|suscribir|newsletter)",
    ],
    include_patterns=[
        r"(menu|carta|food|comida|platos|dishes|specialties|especialidades)",
        r"(dinner|lunch|breakfast|cena|almuerzo|desayuno)",
        r"(eat|comer|dining|cenar|gastronomia|gastronomy)",
        r"(cuisine|cocina|chef|kitchen|recetas|recipes)",
        r"(tapas|raciones|pinchos|entrantes|starters|appetizers)",
        r"(main-courses|platos-principales|postres|desserts)",
        r"(bebidas|drinks|vinos|wines|cocktails|cocteles)",
        r"(vegetarian|vegetariano|vegan|vegano|gluten-free|sin-gluten)",
        r"(takeaway|para-llevar|delivery|domicilio)",
    ],
    priority_patterns=[
        r"(carta|menu|food|comida)",
    ],
)


class PatternRegistry:
    """Registry of filter pattern presets."""

    _patterns: dict[str, FilterPatternSet] = {
        "menu": MENU_PATTERN,
    }

    @classmethod
    def register(cls, pattern: FilterPatternSet) -> None:
        """Register a new preset."""
        cls._patterns[pattern.name] = pattern

    @classmethod
    def get(cls, name: str) -> FilterPatternSet | None:
        """Get a preset by name."""
        return cls._patterns.get(name)

    @classmethod
    def list_patterns(cls) -> list[FilterPatternSet]:
        """List all registered presets."""
        return list(cls._patterns.values())
