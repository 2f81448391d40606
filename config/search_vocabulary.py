"""Search vocabulary for the nutraceutical directory.

Keyword dictionaries and the Indian location gazetteer used by the query
parsers. Extend these lists as the dataset grows.
"""

VALID_ENTITY_TYPES = [
    "manufacturer",
    "distributor",
    "retailer",
    "wholesaler",
    "raw_material",
    "formulator",
    "packager",
    "cro",
]

# Word -> entity type. 'exporter' is deliberately absent: exporters are
# recorded in the functionalities column, not in entity.
ENTITY_KEYWORDS = {
    "manufacturer": "manufacturer",
    "manufacturers": "manufacturer",
    "manufacturing": "manufacturer",
    "distributor": "distributor",
    "distributors": "distributor",
    "distribution": "distributor",
    "retailer": "retailer",
    "retailers": "retailer",
    "retail": "retailer",
    "trader": "wholesaler",
    "traders": "wholesaler",
    "wholesaler": "wholesaler",
    "wholesalers": "wholesaler",
    "supplier": "raw_material",
    "suppliers": "raw_material",
    "formulator": "formulator",
    "formulators": "formulator",
    "formulation": "formulator",
    "packager": "packager",
    "packagers": "packager",
    "packaging": "packager",
    "cro": "cro",
    "testing": "cro",
    "lab": "cro",
    "labs": "cro",
    "laboratory": "cro",
    "laboratories": "cro",
}

ENTITY_PHRASES = {
    "raw material": "raw_material",
    "raw materials": "raw_material",
    "contract research": "cro",
}

VALID_CERTIFICATIONS = [
    "gmp", "fssai", "iso", "fda", "halal", "organic", "haccp", "kosher", "who-gmp",
]

CERTIFICATION_KEYWORDS = {
    "gmp": "gmp",
    "fssai": "fssai",
    "iso": "iso",
    "fda": "fda",
    "halal": "halal",
    "organic": "organic",
    "haccp": "haccp",
    "kosher": "kosher",
    "who-gmp": "who-gmp",
}

PRODUCT_KEYWORDS = [
    "protein", "vitamin", "vitamins", "mineral", "minerals", "supplement", "supplements",
    "ayurvedic", "herbal", "nutraceutical", "whey", "collagen", "omega", "probiotic",
    "capsule", "tablet", "powder", "syrup", "softgel",
]

STOP_WORDS = {
    "give", "me", "find", "show", "list", "get", "the", "a", "an", "of", "in", "at",
    "for", "with", "best", "top", "good", "near", "around", "from", "to", "and", "or",
    "certified", "certificate", "license", "licensed",
}

INDIAN_STATES = [
    "maharashtra", "gujarat", "karnataka", "tamil nadu", "tamilnadu", "kerala", "andhra pradesh",
    "telangana", "west bengal", "rajasthan", "uttar pradesh", "madhya pradesh", "bihar",
    "punjab", "haryana", "odisha", "jharkhand", "chhattisgarh", "assam", "goa",
    "uttarakhand", "himachal pradesh", "jammu", "kashmir", "delhi", "chandigarh",
]

INDIAN_CITIES = [
    "mumbai", "delhi", "bangalore", "bengaluru", "hyderabad", "chennai", "kolkata", "pune",
    "ahmedabad", "jaipur", "lucknow", "surat", "chandigarh", "indore", "nagpur", "vadodara",
    "coimbatore", "kochi", "bhopal", "patna", "gurgaon", "gurugram", "noida", "ghaziabad",
    "faridabad", "thane", "navi mumbai", "nashik", "aurangabad", "solapur", "kolhapur",
    "sangli", "satara", "ratnagiri", "visakhapatnam", "vijayawada", "guntur", "mysore",
    "mangalore", "hubli", "belgaum", "trichy", "madurai", "salem", "erode", "tiruppur",
    "ludhiana", "amritsar", "jalandhar", "agra", "varanasi", "kanpur", "allahabad",
    "meerut", "rajkot", "bhavnagar", "jamnagar", "raipur", "ranchi", "dhanbad",
]

EXPORTER_TERMS = ["export", "exports", "exporter", "exporters", "exporting"]

# Words that keep an entity type alive when the query also asks for exporters
EXPLICIT_ENTITY_WORDS = [
    "manufacturer", "distributor", "supplier", "retailer", "trader",
    "wholesaler", "formulator", "packager", "cro",
]

INTENT_KEYWORDS = {
    "compare": "compare",
    "versus": "compare",
    "vs": "compare",
    "verify": "verify",
    "verification": "verify",
    "contact": "contact",
    "contacts": "contact",
}
