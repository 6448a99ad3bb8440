# ========================== CONFIGURATION ==========================

CONFIG = {
    # --- Request defaults (used when an input is missing or unreadable) ---
    "default_budget": 10,
    "initial_budget": 12,          # what a fresh chat starts with
    "default_calorie_goal": 600,
    "default_hunger_level": 5,
    "default_max_combo_size": 2,
    "default_diet": "any",

    # --- Hunger -> calorie target (0..10 maps to 60%..140% of goal) ---
    "hunger_base_multiplier": 0.6,
    "hunger_span_multiplier": 0.8,
    "hunger_max": 10,

    # --- Scoring: each term is (cap, weight) ---
    "score_base": 50,
    "protein_reward": (30, 20),      # 30 g protein  -> +20
    "fiber_reward": (10, 15),        # 10 g fiber    -> +15
    "sugar_penalty": (25, 15),       # 25 g sugar    -> -15
    "sat_fat_penalty": (20, 10),     # 20 g sat fat  -> -10
    "sodium_penalty": (2000, 10),    # 2000 mg       -> -10
    "calorie_penalty": (300, 20),    # 300 kcal off  -> -20
    "price_penalty_weight": 10,

    # --- Ranking ---
    "top_n": 3,
    "combo_sizes": [1, 2],

    # --- Menu parsing ---
    "placeholder_name": "Unnamed",
    "diet_options": ["any", "vegan", "vegetarian", "gluten-free"],
    # positional order of delimited lines; also the JSON keys
    "menu_columns": [
        "name", "price", "calories", "protein", "fiber",
        "sugar", "satFat", "sodium", "tags",
    ],
}
# ===================================================================

SAMPLE_MENU = """# name,price,calories,protein,fiber,sugar,satFat,sodium,tags
Grilled Chicken Salad,7.99,420,32,6,5,3,620,gluten-free|high-protein
Quinoa Veg Bowl,6.49,480,18,9,7,2,540,vegan|high-fiber
Turkey Wrap,6.99,520,28,5,4,5,780,high-protein
Lentil Soup,4.99,320,16,8,4,1,480,vegan|gluten-free
Veggie Omelette,5.49,380,22,3,3,6,520,vegetarian
Greek Yogurt Parfait,3.99,220,17,2,12,3,120,vegetarian
Fruit Cup,2.49,120,2,3,20,0,5,vegan|gluten-free
Brown Rice,2.99,200,4,2,0,0,0,vegan|gluten-free
Baked Salmon,8.99,460,35,2,1,6,540,gluten-free|high-protein"""
