"""Generation I species catalog used to seed an empty database."""

from kickdex.core.rarity import BASE_CATCH_RATES
from kickdex.core.types import Rarity

LEGENDARY: set[str] = {"Articuno", "Zapdos", "Moltres", "Mewtwo", "Mew"}

RARE: set[str] = {
    "Dragonite", "Lapras", "Snorlax", "Gyarados", "Aerodactyl", "Ditto",
    "Alakazam", "Gengar", "Machamp", "Charizard", "Blastoise", "Venusaur",
    "Onix", "Rhydon", "Exeggutor", "Marowak", "Kingler", "Cloyster",
    "Starmie", "Electabuzz", "Magmar", "Jynx", "Scyther", "Pinsir",
    "Tauros", "Porygon", "Omastar", "Kabutops", "Dragonair", "Dratini",
}

UNCOMMON: set[str] = {
    "Pikachu", "Eevee", "Vaporeon", "Jolteon", "Flareon", "Arcanine",
    "Ninetales", "Clefable", "Primeape", "Poliwrath", "Victreebel",
    "Growlithe", "Rapidash", "Charmeleon", "Wartortle", "Ivysaur",
    "Golbat", "Nidoqueen", "Nidoking", "Hypno", "Mr. Mime", "Farfetch'd",
}

# National dex order
GEN1_SPECIES: list[str] = [
    "Bulbasaur", "Ivysaur", "Venusaur", "Charmander", "Charmeleon", "Charizard",
    "Squirtle", "Wartortle", "Blastoise", "Caterpie", "Metapod", "Butterfree",
    "Weedle", "Kakuna", "Beedrill", "Pidgey", "Pidgeotto", "Pidgeot",
    "Rattata", "Raticate", "Spearow", "Fearow", "Ekans", "Arbok",
    "Pikachu", "Raichu", "Sandshrew", "Sandslash", "Nidoran♀", "Nidorina",
    "Nidoqueen", "Nidoran♂", "Nidorino", "Nidoking", "Clefairy", "Clefable",
    "Vulpix", "Ninetales", "Jigglypuff", "Wigglytuff", "Zubat", "Golbat",
    "Oddish", "Gloom", "Vileplume", "Paras", "Parasect", "Venonat",
    "Venomoth", "Diglett", "Dugtrio", "Meowth", "Persian", "Psyduck",
    "Golduck", "Mankey", "Primeape", "Growlithe", "Arcanine", "Poliwag",
    "Poliwhirl", "Poliwrath", "Abra", "Kadabra", "Alakazam", "Machop",
    "Machoke", "Machamp", "Bellsprout", "Weepinbell", "Victreebel", "Tentacool",
    "Tentacruel", "Geodude", "Graveler", "Golem", "Ponyta", "Rapidash",
    "Slowpoke", "Slowbro", "Magnemite", "Magneton", "Farfetch'd", "Doduo",
    "Dodrio", "Seel", "Dewgong", "Grimer", "Muk", "Shellder",
    "Cloyster", "Gastly", "Haunter", "Gengar", "Onix", "Drowzee",
    "Hypno", "Krabby", "Kingler", "Voltorb", "Electrode", "Exeggcute",
    "Exeggutor", "Cubone", "Marowak", "Hitmonlee", "Hitmonchan", "Lickitung",
    "Koffing", "Weezing", "Rhyhorn", "Rhydon", "Chansey", "Tangela",
    "Kangaskhan", "Horsea", "Seadra", "Goldeen", "Seaking", "Staryu",
    "Starmie", "Mr. Mime", "Scyther", "Jynx", "Electabuzz", "Magmar",
    "Pinsir", "Tauros", "Magikarp", "Gyarados", "Lapras", "Ditto",
    "Eevee", "Vaporeon", "Jolteon", "Flareon", "Porygon", "Omanyte",
    "Omastar", "Kabuto", "Kabutops", "Aerodactyl", "Snorlax", "Articuno",
    "Zapdos", "Moltres", "Dratini", "Dragonair", "Dragonite", "Mewtwo",
    "Mew",
]


def rarity_for(name: str) -> Rarity:
    """Get the rarity tier of a Generation I species."""
    if name in LEGENDARY:
        return Rarity.LEGENDARY
    if name in RARE:
        return Rarity.RARE
    if name in UNCOMMON:
        return Rarity.UNCOMMON
    return Rarity.COMMON


def build_catalog() -> list[dict]:
    """Build seed rows (name, rarity, base_rate) for every Generation I species."""
    rows = []
    for name in GEN1_SPECIES:
        rarity = rarity_for(name)
        rows.append({
            "name": name,
            "rarity": rarity.value,
            "base_rate": BASE_CATCH_RATES[rarity.value],
        })
    return rows
