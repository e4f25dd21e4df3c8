"""
Categorização local por palavras-chave (fallback quando a IA falha)
"""

from typing import Optional, Tuple

from models.schemas import ExpenseCategory


# A ordem importa: a primeira categoria com alguma palavra encontrada vence
KEYWORD_RULES: Tuple[Tuple[ExpenseCategory, Tuple[str, ...]], ...] = (
    (ExpenseCategory.FOOD, (
        'restaurant', 'food', 'coffee', 'lunch', 'dinner', 'breakfast', 'cafe', 'pizza',
        'burger', 'sandwich', 'grocery', 'supermarket', 'market', 'bakery', 'bar', 'pub',
        'drink', 'beer', 'wine', 'snack', 'meal', 'eat', 'dining', 'takeout', 'delivery',
        'mcdonalds', 'starbucks', 'subway', 'kfc', 'dominos', 'uber eats', 'doordash',
        'grubhub', 'postmates', 'foodpanda', 'zomato', 'swiggy',
    )),
    (ExpenseCategory.TRANSPORTATION, (
        'gas', 'fuel', 'petrol', 'diesel', 'uber', 'lyft', 'taxi', 'bus', 'train', 'metro',
        'parking', 'toll', 'car', 'vehicle', 'transport', 'flight', 'airline', 'plane',
        'airport', 'rental', 'maintenance', 'repair', 'oil change', 'tire', 'insurance',
        'registration', 'license', 'subway', 'public transport', 'ride share', 'carpool',
    )),
    (ExpenseCategory.ENTERTAINMENT, (
        'movie', 'cinema', 'theater', 'concert', 'music', 'game', 'gaming', 'netflix',
        'spotify', 'youtube', 'entertainment', 'fun', 'party', 'club', 'event', 'ticket',
        'show', 'performance', 'festival', 'amusement', 'park', 'zoo', 'museum', 'gallery',
        'bowling', 'pool', 'arcade', 'subscription', 'streaming', 'hulu', 'disney', 'prime',
    )),
    (ExpenseCategory.SHOPPING, (
        'amazon', 'ebay', 'shop', 'store', 'mall', 'clothing', 'clothes', 'shoes', 'dress',
        'shirt', 'pants', 'jacket', 'electronics', 'phone', 'laptop', 'computer', 'gadget',
        'book', 'furniture', 'home', 'decor', 'gift', 'present', 'online', 'purchase',
        'buy', 'walmart', 'target', 'costco', 'nike', 'adidas', 'apple', 'samsung', 'sony',
    )),
    (ExpenseCategory.BILLS, (
        'electric', 'electricity', 'power', 'water', 'gas bill', 'internet', 'wifi',
        'phone bill', 'mobile', 'cable', 'tv', 'utility', 'utilities', 'rent', 'mortgage',
        'insurance', 'loan', 'payment', 'subscription', 'service', 'maintenance', 'repair',
        'bank', 'fee', 'charge', 'bill', 'invoice', 'statement', 'credit card',
    )),
    (ExpenseCategory.HEALTHCARE, (
        'doctor', 'hospital', 'medical', 'medicine', 'pharmacy', 'drug', 'prescription',
        'health', 'dental', 'dentist', 'clinic', 'appointment', 'checkup', 'surgery',
        'treatment', 'therapy', 'insurance', 'copay', 'deductible', 'medication', 'pills',
        'vitamins', 'supplements', 'nurse', 'specialist', 'emergency', 'urgent care',
    )),
)


def classify_expense(description: Optional[str]) -> ExpenseCategory:
    """Categorizar descrição por substring; sem correspondência retorna Other"""
    desc = (description or "").lower().strip()
    if not desc:
        return ExpenseCategory.OTHER

    for category, keywords in KEYWORD_RULES:
        if any(keyword in desc for keyword in keywords):
            return category

    return ExpenseCategory.OTHER
