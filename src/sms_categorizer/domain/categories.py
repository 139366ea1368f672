from sms_categorizer.models import Category

FOOD_AND_DINING = 1
SHOPPING = 2
TRANSPORTATION = 3
BILLS_AND_UTILITIES = 4
ENTERTAINMENT = 5
HEALTHCARE = 6
INVESTMENT = 7
INCOME = 8
TRANSFER = 9
UNCATEGORIZED = 10

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id=FOOD_AND_DINING, name="Food & Dining", icon="restaurant", color="#FF9800", is_default=True),
    Category(id=SHOPPING, name="Shopping", icon="shopping_cart", color="#2196F3", is_default=True),
    Category(id=TRANSPORTATION, name="Transportation", icon="directions_car", color="#4CAF50", is_default=True),
    Category(id=BILLS_AND_UTILITIES, name="Bills & Utilities", icon="receipt", color="#F44336", is_default=True),
    Category(id=ENTERTAINMENT, name="Entertainment", icon="movie", color="#9C27B0", is_default=True),
    Category(id=HEALTHCARE, name="Healthcare", icon="local_hospital", color="#E91E63", is_default=True),
    Category(id=INVESTMENT, name="Investment", icon="trending_up", color="#009688", is_default=True),
    Category(id=INCOME, name="Income", icon="attach_money", color="#8BC34A", is_default=True),
    Category(id=TRANSFER, name="Transfer", icon="swap_horiz", color="#607D8B", is_default=True),
    Category(id=UNCATEGORIZED, name="Uncategorized", icon="help_outline", color="#9E9E9E", is_default=True),
)

# Iteration order is match priority for the keyword classifier.
DEFAULT_KEYWORD_MAPPINGS: dict[str, int] = {
    "restaurant": FOOD_AND_DINING,
    "cafe": FOOD_AND_DINING,
    "coffee": FOOD_AND_DINING,
    "pizza": FOOD_AND_DINING,
    "burger": FOOD_AND_DINING,
    "food": FOOD_AND_DINING,
    "dining": FOOD_AND_DINING,
    "kitchen": FOOD_AND_DINING,
    "bakery": FOOD_AND_DINING,
    "swiggy": FOOD_AND_DINING,
    "zomato": FOOD_AND_DINING,
    "dominos": FOOD_AND_DINING,
    "mcdonalds": FOOD_AND_DINING,
    "kfc": FOOD_AND_DINING,
    "subway": FOOD_AND_DINING,
    "amazon": SHOPPING,
    "flipkart": SHOPPING,
    "myntra": SHOPPING,
    "shopping": SHOPPING,
    "mall": SHOPPING,
    "store": SHOPPING,
    "market": SHOPPING,
    "retail": SHOPPING,
    "grocery": SHOPPING,
    "walmart": SHOPPING,
    "target": SHOPPING,
    "costco": SHOPPING,
    "uber": TRANSPORTATION,
    "ola": TRANSPORTATION,
    "taxi": TRANSPORTATION,
    "bus": TRANSPORTATION,
    "metro": TRANSPORTATION,
    "train": TRANSPORTATION,
    "flight": TRANSPORTATION,
    "airline": TRANSPORTATION,
    "fuel": TRANSPORTATION,
    "petrol": TRANSPORTATION,
    "gas": TRANSPORTATION,
    "parking": TRANSPORTATION,
    "toll": TRANSPORTATION,
    "transport": TRANSPORTATION,
    "electricity": BILLS_AND_UTILITIES,
    "water": BILLS_AND_UTILITIES,
    "internet": BILLS_AND_UTILITIES,
    "phone": BILLS_AND_UTILITIES,
    "mobile": BILLS_AND_UTILITIES,
    "broadband": BILLS_AND_UTILITIES,
    "cable": BILLS_AND_UTILITIES,
    "insurance": BILLS_AND_UTILITIES,
    "rent": BILLS_AND_UTILITIES,
    "mortgage": BILLS_AND_UTILITIES,
    "loan": BILLS_AND_UTILITIES,
    "emi": BILLS_AND_UTILITIES,
    "bill": BILLS_AND_UTILITIES,
    "utility": BILLS_AND_UTILITIES,
    "movie": ENTERTAINMENT,
    "cinema": ENTERTAINMENT,
    "theater": ENTERTAINMENT,
    "netflix": ENTERTAINMENT,
    "spotify": ENTERTAINMENT,
    "youtube": ENTERTAINMENT,
    "gaming": ENTERTAINMENT,
    "game": ENTERTAINMENT,
    "entertainment": ENTERTAINMENT,
    "music": ENTERTAINMENT,
    "concert": ENTERTAINMENT,
    "event": ENTERTAINMENT,
    "hospital": HEALTHCARE,
    "doctor": HEALTHCARE,
    "medical": HEALTHCARE,
    "pharmacy": HEALTHCARE,
    "medicine": HEALTHCARE,
    "health": HEALTHCARE,
    "clinic": HEALTHCARE,
    "dental": HEALTHCARE,
    "lab": HEALTHCARE,
    "mutual": INVESTMENT,
    "fund": INVESTMENT,
    "stock": INVESTMENT,
    "share": INVESTMENT,
    "investment": INVESTMENT,
    "trading": INVESTMENT,
    "sip": INVESTMENT,
    "deposit": INVESTMENT,
    "zerodha": INVESTMENT,
    "groww": INVESTMENT,
    "salary": INCOME,
    "income": INCOME,
    "bonus": INCOME,
    "refund": INCOME,
    "cashback": INCOME,
    "reward": INCOME,
    "interest": INCOME,
    "dividend": INCOME,
    "transfer": TRANSFER,
    "upi": TRANSFER,
    "paytm": TRANSFER,
    "gpay": TRANSFER,
    "phonepe": TRANSFER,
    "neft": TRANSFER,
    "rtgs": TRANSFER,
    "imps": TRANSFER,
}


def default_category_map() -> dict[int, Category]:
    return {category.id: category for category in DEFAULT_CATEGORIES}
