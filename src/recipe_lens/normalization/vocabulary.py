"""Fixed lookup tables shared by the parser, normalizer and pipeline stages.

Every table is immutable (tuples, frozensets, read-only mappings) and built once
at import time, so concurrent extractions can read them without locking.
"""

from __future__ import annotations

from types import MappingProxyType

# Canonical unit -> accepted spellings. The canonical spelling is always listed
# so that normalizing a canonical unit returns it unchanged.
UNIT_SYNONYMS = MappingProxyType(
    {
        "cups": ("cups", "cup", "c"),
        "tablespoons": ("tablespoons", "tablespoon", "tbsp", "tbsps", "tbs", "tbl", "tblsp", "T"),
        "teaspoons": ("teaspoons", "teaspoon", "tsp", "tsps", "tspn", "t"),
        "fluid ounces": ("fluid ounces", "fluid ounce", "fl oz", "fl. oz", "fl.oz", "floz"),
        "ounces": ("ounces", "ounce", "oz"),
        "pounds": ("pounds", "pound", "lbs", "lb"),
        "grams": ("grams", "gram", "gr", "g", "grammes", "gramme"),
        "kilograms": ("kilograms", "kilogram", "kilos", "kilo", "kg", "kgs"),
        "milligrams": ("milligrams", "milligram", "mg"),
        "milliliters": ("milliliters", "milliliter", "millilitres", "millilitre", "ml", "mls"),
        "liters": ("liters", "liter", "litres", "litre", "l"),
        "pints": ("pints", "pint", "pt"),
        "quarts": ("quarts", "quart", "qt"),
        "gallons": ("gallons", "gallon", "gal"),
        "pieces": ("pieces", "piece", "pcs", "pc", "whole"),
        "cloves": ("cloves", "clove"),
        "slices": ("slices", "slice"),
        "cans": ("cans", "can", "tins", "tin"),
        "jars": ("jars", "jar"),
        "bottles": ("bottles", "bottle"),
        "packages": ("packages", "package", "packets", "packet", "packs", "pack", "pkgs", "pkg"),
        "boxes": ("boxes", "box"),
        "bags": ("bags", "bag"),
        "bunches": ("bunches", "bunch"),
        "heads": ("heads", "head"),
        "stalks": ("stalks", "stalk"),
        "sprigs": ("sprigs", "sprig"),
        "sticks": ("sticks", "stick"),
        "leaves": ("leaves", "leaf"),
        "pinches": ("pinches", "pinch"),
        "dashes": ("dashes", "dash"),
        "handfuls": ("handfuls", "handful"),
        "sprinkles": ("sprinkles", "sprinkle"),
        "inches": ("inches", "inch", "in"),
        "centimeters": ("centimeters", "centimeter", "centimetres", "centimetre", "cm"),
    }
)

CANONICAL_UNITS = frozenset(UNIT_SYNONYMS)

# Unit tokens the line parser recognizes right after a quantity, most specific
# first. Single letters are matched only when followed by whitespace or the end
# of the line (see parsing.heuristic).
LINE_UNIT_TOKENS = (
    "fluid ounces",
    "fluid ounce",
    "fl. oz",
    "fl oz",
    "tablespoons",
    "tablespoon",
    "teaspoons",
    "teaspoon",
    "milliliters",
    "milliliter",
    "millilitres",
    "millilitre",
    "kilograms",
    "kilogram",
    "milligrams",
    "milligram",
    "centimeters",
    "centimeter",
    "packages",
    "package",
    "handfuls",
    "handful",
    "bunches",
    "gallons",
    "gallon",
    "packets",
    "packet",
    "pinches",
    "sprinkle",
    "ounces",
    "ounce",
    "pounds",
    "pound",
    "quarts",
    "quart",
    "liters",
    "liter",
    "litres",
    "litre",
    "grams",
    "gram",
    "cloves",
    "clove",
    "slices",
    "slice",
    "pieces",
    "piece",
    "sticks",
    "stick",
    "sprigs",
    "sprig",
    "stalks",
    "stalk",
    "leaves",
    "bottles",
    "bottle",
    "dashes",
    "inches",
    "inch",
    "pints",
    "pint",
    "bunch",
    "heads",
    "head",
    "pinch",
    "boxes",
    "cups",
    "cup",
    "cans",
    "can",
    "jars",
    "jar",
    "bags",
    "bag",
    "dash",
    "tbsp",
    "tbs",
    "tsp",
    "lbs",
    "lb",
    "oz",
    "kg",
    "mg",
    "ml",
    "cm",
    "pkg",
    "pcs",
    "pc",
    "g",
    "l",
)

# Quantity words with a conventional amount.
INFORMAL_QUANTITIES = MappingProxyType(
    {
        "pinch": 0.125,
        "dash": 0.25,
        "sprinkle": 0.5,
        "handful": 0.33,
        "bunch": 1,
        "head": 1,
        "stalk": 1,
        "package": 1,
        "pack": 1,
        "box": 1,
        "bag": 1,
        "can": 1,
        "jar": 1,
        "bottle": 1,
    }
)

NUMBER_WORDS = MappingProxyType(
    {
        "a": 1,
        "an": 1,
        "one": 1,
        "two": 2,
        "three": 3,
        "four": 4,
        "five": 5,
        "six": 6,
        "seven": 7,
        "eight": 8,
        "nine": 9,
        "ten": 10,
        "eleven": 11,
        "twelve": 12,
        "half": 0.5,
        "dozen": 12,
    }
)

UNICODE_FRACTIONS = MappingProxyType(
    {
        "¼": 0.25,
        "½": 0.5,
        "¾": 0.75,
        "⅓": 1 / 3,
        "⅔": 2 / 3,
        "⅛": 0.125,
        "⅜": 0.375,
        "⅝": 0.625,
        "⅞": 0.875,
        "⅕": 0.2,
        "⅙": 1 / 6,
    }
)

# Category -> (keywords, subcategories). Order matters for ties.
CATEGORY_TAXONOMY = MappingProxyType(
    {
        "produce": (
            (
                "tomato", "onion", "garlic", "carrot", "potato", "lettuce", "celery", "bell pepper",
                "cucumber", "spinach", "broccoli", "cauliflower", "mushroom", "avocado", "lemon",
                "lime", "herb", "basil", "parsley", "cilantro", "mint", "oregano", "thyme",
                "rosemary", "sage", "dill", "chive", "fruit", "apple", "banana", "orange", "berry",
                "strawberry", "blueberry", "raspberry", "kale", "zucchini", "squash", "eggplant",
                "shallot", "scallion", "green onion", "ginger", "jalapeno", "cabbage", "pea",
                "corn", "leek", "radish", "beet", "pear", "peach", "mango", "pineapple", "grape",
            ),
            ("vegetables", "fruits", "herbs", "leafy_greens"),
        ),
        "dairy": (
            (
                "milk", "cheese", "butter", "cream", "yogurt", "yoghurt", "sour cream",
                "cream cheese", "mozzarella", "cheddar", "parmesan", "gouda", "brie", "feta",
                "goat cheese", "blue cheese", "whipped cream", "heavy cream", "half and half",
                "evaporated milk", "condensed milk", "buttermilk", "ricotta", "egg", "ghee",
            ),
            ("milk", "cheese", "cream", "yogurt", "eggs", "other"),
        ),
        "meat": (
            (
                "chicken", "beef", "pork", "turkey", "lamb", "fish", "salmon", "tuna", "shrimp",
                "sausage", "bacon", "ham", "steak", "ground beef", "pork chop", "chicken breast",
                "thigh", "drumstick", "wing", "ribs", "veal", "duck", "seafood", "crab",
                "lobster", "clam", "mussel", "prawn", "scallop", "cod", "anchovy", "chorizo",
            ),
            ("poultry", "beef", "pork", "lamb", "seafood", "processed_meat"),
        ),
        "pantry": (
            (
                "flour", "sugar", "salt", "pepper", "black pepper", "oil", "olive oil", "vinegar",
                "soy sauce", "rice", "pasta", "cereal", "beans", "nuts", "seeds", "honey",
                "maple syrup", "ketchup", "mustard", "mayonnaise", "hot sauce", "worcestershire",
                "sriracha", "barbecue sauce", "teriyaki", "hoisin", "oyster sauce", "fish sauce",
                "coconut milk", "broth", "stock", "chicken broth", "chicken stock", "beef broth",
                "beef stock", "bouillon", "tomato sauce", "tomato paste", "canned tomatoes",
                "diced tomatoes", "crushed tomatoes", "baking powder", "baking soda", "yeast",
                "vanilla", "cinnamon", "cumin", "paprika", "nutmeg", "oats", "quinoa", "lentil",
                "chickpea", "cornstarch", "cocoa", "chocolate chips", "peanut butter", "almond",
                "walnut", "pecan", "cashew", "noodle", "spaghetti", "breadcrumbs",
            ),
            (
                "grains", "pasta", "canned_goods", "oils_vinegars", "condiments", "spices",
                "sweeteners", "nuts_seeds", "baking",
            ),
        ),
        "frozen": (
            (
                "frozen", "ice cream", "frozen vegetables", "frozen fruit", "frozen pizza",
                "frozen dinners", "frozen meat", "frozen fish", "frozen peas",
            ),
            ("vegetables", "fruits", "meals", "meat_seafood"),
        ),
        "bakery": (
            (
                "bread", "roll", "bagel", "croissant", "muffin", "cake", "cookie", "pastry",
                "pie crust", "tart", "biscuit", "scone", "donut", "cinnamon roll", "baguette",
                "ciabatta", "sourdough", "rye bread", "whole wheat bread", "white bread",
                "tortilla", "pita", "bun",
            ),
            ("bread", "pastries", "desserts"),
        ),
        "beverages": (
            (
                "water", "juice", "soda", "coffee", "tea", "wine", "beer", "smoothie", "cocktail",
                "spirits", "liquor", "energy drink", "sports drink", "espresso", "rum", "vodka",
            ),
            ("water", "juice", "coffee_tea", "alcoholic", "other"),
        ),
        "household": (
            (
                "paper towel", "foil", "aluminum foil", "plastic wrap", "parchment paper",
                "trash bag", "cleaning", "detergent", "soap", "sponge", "dish soap", "laundry",
            ),
            ("kitchen_supplies", "cleaning", "paper_products"),
        ),
    }
)

CATEGORIES = tuple(CATEGORY_TAXONOMY) + ("other",)

SUBCATEGORY_KEYWORDS = MappingProxyType(
    {
        "vegetables": (
            "tomato", "onion", "carrot", "potato", "pepper", "cucumber", "broccoli",
            "cauliflower", "zucchini", "squash", "eggplant", "celery", "mushroom", "corn", "pea",
        ),
        "leafy_greens": ("lettuce", "spinach", "kale", "arugula", "chard", "cabbage"),
        "fruits": (
            "apple", "banana", "orange", "berry", "strawberry", "blueberry", "raspberry",
            "lemon", "lime", "avocado", "pear", "peach", "mango", "pineapple", "grape",
        ),
        "herbs": (
            "basil", "parsley", "cilantro", "mint", "oregano", "thyme", "rosemary", "sage",
            "dill", "chive",
        ),
        "poultry": ("chicken", "turkey", "duck"),
        "beef": ("beef", "steak", "veal"),
        "pork": ("pork", "bacon", "ham", "sausage", "chorizo"),
        "lamb": ("lamb",),
        "seafood": (
            "fish", "salmon", "tuna", "shrimp", "crab", "lobster", "clam", "mussel", "prawn",
            "scallop", "cod", "anchovy",
        ),
        "grains": ("rice", "quinoa", "oats", "barley", "couscous", "flour", "cornstarch"),
        "pasta": ("pasta", "spaghetti", "noodle", "macaroni", "penne"),
        "canned_goods": (
            "canned", "tomato sauce", "tomato paste", "coconut milk", "broth", "stock",
            "bouillon", "beans", "chickpea", "lentil",
        ),
        "oils_vinegars": ("oil", "vinegar", "balsamic"),
        "condiments": (
            "ketchup", "mustard", "mayonnaise", "soy sauce", "hot sauce", "worcestershire",
            "sriracha", "hoisin", "teriyaki", "fish sauce", "oyster sauce", "barbecue sauce",
        ),
        "spices": ("salt", "pepper", "cumin", "paprika", "cinnamon", "nutmeg", "vanilla"),
        "sweeteners": ("sugar", "honey", "maple syrup", "molasses"),
        "nuts_seeds": ("nuts", "seeds", "almond", "walnut", "pecan", "cashew", "peanut"),
        "baking": ("baking powder", "baking soda", "yeast", "cocoa", "chocolate chips"),
        "milk": ("milk", "half and half", "buttermilk"),
        "cheese": (
            "cheese", "cheddar", "mozzarella", "parmesan", "feta", "ricotta", "gouda", "brie",
        ),
        "cream": ("cream", "sour cream", "heavy cream", "whipped cream"),
        "yogurt": ("yogurt", "yoghurt"),
        "eggs": ("egg",),
        "coffee_tea": ("coffee", "tea", "espresso"),
        "alcoholic": ("wine", "beer", "spirits", "liquor", "rum", "vodka"),
        "juice": ("juice",),
        "bread": ("bread", "baguette", "ciabatta", "sourdough", "bagel", "roll", "bun", "tortilla", "pita"),
        "pastries": ("croissant", "pastry", "muffin", "scone", "donut", "pie crust", "tart"),
        "desserts": ("cake", "cookie", "ice cream"),
    }
)

ALLERGEN_KEYWORDS = MappingProxyType(
    {
        "milk": ("milk", "cheese", "butter", "cream", "yogurt", "yoghurt", "dairy", "ghee", "whey", "parmesan", "mozzarella", "cheddar", "ricotta"),
        "eggs": ("egg", "mayonnaise"),
        "wheat": ("flour", "wheat", "bread", "pasta", "couscous", "breadcrumbs", "spaghetti", "noodle"),
        "soy": ("soy", "soy sauce", "tofu", "edamame", "miso", "tempeh"),
        "peanuts": ("peanut",),
        "tree nuts": ("almond", "walnut", "pecan", "cashew", "pistachio", "hazelnut", "macadamia"),
        "fish": ("fish", "salmon", "tuna", "cod", "tilapia", "anchovy", "fish sauce"),
        "shellfish": ("shrimp", "crab", "lobster", "clam", "mussel", "scallop", "prawn", "oyster sauce"),
    }
)

# Phrases that contain an allergen keyword without carrying the allergen.
ALLERGEN_EXCLUSIONS = MappingProxyType(
    {
        "milk": (
            "peanut butter", "almond butter", "cashew butter", "cocoa butter", "apple butter",
            "coconut milk", "coconut cream", "almond milk", "oat milk", "soy milk", "rice milk",
            "cream of tartar",
        ),
        "wheat": ("rice noodle", "rice flour", "almond flour", "coconut flour", "corn flour", "gluten-free"),
        "tree nuts": ("almond extract",),
    }
)

PREPARATION_WORDS = (
    "chopped", "diced", "minced", "grated", "sliced", "crushed", "mashed", "blended", "pureed",
    "pressed", "squeezed", "roasted", "toasted", "fried", "boiled", "steamed", "baked", "grilled",
    "beaten", "melted", "softened", "peeled", "shredded", "cubed", "julienned", "zested",
    "juiced", "drained", "rinsed", "halved", "quartered", "sifted", "trimmed", "seeded",
    "deveined", "thawed", "cooked", "packed",
)

PREPARATION_ADVERBS = ("finely", "roughly", "coarsely", "thinly", "thickly", "freshly", "lightly", "well")

# Descriptors stripped when building a dedup key.
NAME_DESCRIPTORS = ("fresh", "dried", "organic", "natural", "ripe", "large", "small", "medium", "extra")

INSTRUCTION_VERBS = (
    "add", "heat", "cook", "bake", "boil", "simmer", "fry", "grill", "roast", "mix", "stir",
    "combine", "pour", "fold", "whisk", "beat", "blend", "transfer", "divide", "garnish",
    "serve", "season", "bring", "reduce", "preheat", "place", "remove", "let", "cover",
    "drain", "spread", "sprinkle", "toss", "set", "put", "cut", "chop", "slice", "dice",
    "melt", "saute", "sauté", "brush", "arrange", "repeat", "allow", "turn", "using", "in",
    "once", "when", "until", "while", "meanwhile",
)

# Verbs that open a cooking step when they lead a line.
STEP_VERBS = ("preheat", "heat", "cook", "bake", "boil", "simmer", "fry", "grill", "roast")

FOOD_KEYWORDS = tuple(
    sorted(
        {
            "salt", "pepper", "oil", "sugar", "flour", "butter", "onion", "garlic", "tomato",
            "cheese", "chicken", "beef", "pork", "fish", "egg", "milk", "cream", "herb", "spice",
            "lettuce", "apple", "spinach", "kale", "rice", "pasta", "bean", "broth", "stock",
            "vinegar", "juice", "honey", "maple", "mustard", "yogurt", "walnut", "pecan",
            "almond", "cashew", "berry", "carrot", "potato", "celery", "lemon", "lime", "basil",
            "parsley", "cilantro", "thyme", "rosemary", "oregano", "ginger", "cinnamon", "cumin",
            "paprika", "vanilla", "yeast", "water", "wine", "shrimp", "salmon", "bacon", "ham",
            "sausage", "turkey", "lamb", "tofu", "noodle", "bread", "mushroom", "zucchini",
            "broccoli", "corn", "pea", "chocolate", "cocoa", "sauce", "soda", "powder",
            "shallot", "scallion", "avocado", "cucumber", "parmesan", "mozzarella",
        },
        key=len,
        reverse=True,
    )
)

SECTION_MARKERS = ("ingredients", "ingredient list", "you will need", "what you need", "shopping list")

INSTRUCTION_MARKERS = (
    "instructions", "directions", "method", "steps", "preparation", "how to make it",
    "how to make", "procedure",
)

METADATA_MARKERS = (
    "yield", "yields", "servings", "serves", "makes", "prep time", "preparation time",
    "cook time", "cooking time", "total time", "oven temperature", "oven temp", "nutrition",
    "calories",
)
