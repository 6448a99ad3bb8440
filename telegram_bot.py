import html
import logging
import math
import os
from typing import Dict, List

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ApplicationBuilder, CommandHandler, ContextTypes, CallbackQueryHandler, MessageHandler, filters

from meal_recommender import DIET_OPTIONS, build_request, format_combos, recommend, summarize
from menu_parser import filter_by_diet, format_items, parse_menu
from config import CONFIG, SAMPLE_MENU

logger = logging.getLogger(__name__)

MAX_MESSAGE_CHARS = 4000

USAGE = {
    "budget": "/budget <amount>, e.g. /budget 12",
    "calories": "/calories <goal>, e.g. /calories 600",
    "hunger": "/hunger <0-10>, e.g. /hunger 5",
    "combo": "/combo <1|2>",
}

def default_inputs() -> Dict:
    return {
        "menu": SAMPLE_MENU,
        "budget": CONFIG["initial_budget"],
        "calorie_goal": CONFIG["default_calorie_goal"],
        "hunger_level": CONFIG["default_hunger_level"],
        "max_combo_size": CONFIG["default_max_combo_size"],
        "diet": CONFIG["default_diet"],
    }

def get_inputs(user_data: Dict) -> Dict:
    # in-memory only; a restart brings back the defaults
    inputs = user_data.setdefault("inputs", default_inputs())
    for k, v in default_inputs().items():
        inputs.setdefault(k, v)
    return inputs

def describe_settings(inputs: Dict) -> str:
    req = build_request(inputs["budget"], inputs["calorie_goal"], inputs["hunger_level"],
                        inputs["max_combo_size"], inputs["diet"])
    return (
        f"Budget: ${req.budget:.2f}\n"
        f"Calorie goal: {req.calorie_goal:g}\n"
        f"Hunger level: {req.hunger_level}/10\n"
        f"Max combo size: {req.max_combo_size}\n"
        f"Diet: {req.diet}"
    )

def clip(text: str) -> str:
    if len(text) <= MAX_MESSAGE_CHARS:
        return text
    return text[:MAX_MESSAGE_CHARS - 1] + "…"

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    get_inputs(context.user_data)
    await update.message.reply_text(
        "Hi! I'm your Healthy Meal Recommender 🥗\n\n"
        "• Paste a menu (JSON array or CSV lines) – or use the sample one\n"
        "• /budget, /calories, /hunger, /combo, /diet – set your targets\n"
        "• /recommend – get the three best combos\n"
        "• /help – see commands"
    )

async def help_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(
        "/menu – Paste a new menu\n"
        "/sample – Go back to the sample menu\n"
        "/budget <amount> – Budget per meal\n"
        "/calories <goal> – Calorie goal\n"
        "/hunger <0-10> – Scales calorie target from 60% to 140%\n"
        "/combo <1|2> – Max items per combo\n"
        "/diet – Dietary filter\n"
        "/items – Show parsed items\n"
        "/settings – Show current targets\n"
        "/recommend – Top 3 healthy combos\n"
        "/reset – Restore defaults\n\n"
        "CSV format: name,price,calories,protein,fiber,sugar,satFat,sodium,tags "
        "(tags separated by |)"
    )

async def reset(update: Update, context: ContextTypes.DEFAULT_TYPE):
    context.user_data["inputs"] = default_inputs()
    await update.message.reply_text("Back to the sample menu and default targets.")

# --- Menu ---
async def menu(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(
        "Paste your menu as a JSON array or one item per line, e.g.:\n"
        "`Lentil Soup,4.99,320,16,8,4,1,480,vegan|gluten-free`",
        parse_mode="Markdown"
    )

async def menu_text(update: Update, context: ContextTypes.DEFAULT_TYPE):
    inputs = get_inputs(context.user_data)
    raw = update.message.text or ""
    items = parse_menu(raw)
    if not items:
        await update.message.reply_text("No valid items found. Check your menu format.")
        return
    inputs["menu"] = raw
    logger.info("User %s loaded a menu with %d item(s)", update.effective_user.id, len(items))
    await update.message.reply_text(f"Got it. {len(items)} item(s) loaded. Send /recommend when ready.")

async def sample(update: Update, context: ContextTypes.DEFAULT_TYPE):
    get_inputs(context.user_data)["menu"] = SAMPLE_MENU
    await update.message.reply_text("Sample menu restored.")

# --- Targets ---
def parse_arg(args: List[str]) -> float:
    if not args:
        raise ValueError("missing argument")
    value = float(args[0])
    if not math.isfinite(value):
        raise ValueError("not a finite number")
    return value

async def set_budget(update: Update, context: ContextTypes.DEFAULT_TYPE):
    try:
        value = parse_arg(context.args)
        if value < 0:
            raise ValueError("negative budget")
    except ValueError:
        await update.message.reply_text(USAGE["budget"])
        return
    get_inputs(context.user_data)["budget"] = value
    await update.message.reply_text(f"Budget set to ${value:.2f}")

async def set_calories(update: Update, context: ContextTypes.DEFAULT_TYPE):
    try:
        value = parse_arg(context.args)
        if value <= 0:
            raise ValueError("calorie goal must be positive")
    except ValueError:
        await update.message.reply_text(USAGE["calories"])
        return
    get_inputs(context.user_data)["calorie_goal"] = value
    await update.message.reply_text(f"Calorie goal set to {value:g}")

async def set_hunger(update: Update, context: ContextTypes.DEFAULT_TYPE):
    try:
        value = parse_arg(context.args)
        if value != int(value) or not 0 <= value <= CONFIG["hunger_max"]:
            raise ValueError("hunger out of range")
    except ValueError:
        await update.message.reply_text(USAGE["hunger"])
        return
    get_inputs(context.user_data)["hunger_level"] = int(value)
    await update.message.reply_text(f"Hunger level set to {int(value)}/10")

async def set_combo(update: Update, context: ContextTypes.DEFAULT_TYPE):
    try:
        value = parse_arg(context.args)
        if value not in CONFIG["combo_sizes"]:
            raise ValueError("unsupported combo size")
    except ValueError:
        await update.message.reply_text(USAGE["combo"])
        return
    get_inputs(context.user_data)["max_combo_size"] = int(value)
    await update.message.reply_text(f"Max combo size set to {int(value)}")

def build_diet_keyboard(selected: str):
    rows = []
    for d in DIET_OPTIONS:
        label = f"{'✅' if d == selected else '⬜️'} {d.title()}"
        rows.append([InlineKeyboardButton(label, callback_data=f"diet_{d}")])
    return InlineKeyboardMarkup(rows)

async def diet(update: Update, context: ContextTypes.DEFAULT_TYPE):
    inputs = get_inputs(context.user_data)
    await update.message.reply_text("Dietary filter:", reply_markup=build_diet_keyboard(inputs["diet"]))

async def choose_diet(update: Update, context: ContextTypes.DEFAULT_TYPE):
    query = update.callback_query
    await query.answer()
    _, d = query.data.split("_", 1)
    if d not in DIET_OPTIONS:
        await query.edit_message_text("Invalid selection. Try again with /diet")
        return
    get_inputs(context.user_data)["diet"] = d
    await query.edit_message_text(f"Dietary filter: {d.title()}")

async def settings(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.message.reply_text(describe_settings(get_inputs(context.user_data)))

# --- Results ---
async def items(update: Update, context: ContextTypes.DEFAULT_TYPE):
    inputs = get_inputs(context.user_data)
    shown = filter_by_diet(parse_menu(inputs["menu"]), inputs["diet"])
    table = clip(format_items(shown))
    await update.effective_chat.send_message(f"<pre>{html.escape(table)}</pre>", parse_mode="HTML")

async def run_recommender(update: Update, context: ContextTypes.DEFAULT_TYPE):
    inputs = get_inputs(context.user_data)
    result = recommend(
        inputs["menu"],
        budget=inputs["budget"],
        calorie_goal=inputs["calorie_goal"],
        hunger_level=inputs["hunger_level"],
        max_combo_size=inputs["max_combo_size"],
        diet=inputs["diet"],
    )
    logger.info("Recommendation for user %s: %s", update.effective_user.id, summarize(result))
    await update.effective_chat.send_message(clip(format_combos(result.combos)))

def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    token = os.getenv("TELEGRAM_TOKEN")
    if not token:
        raise RuntimeError("Missing TELEGRAM_TOKEN environment variable")

    app = ApplicationBuilder().token(token).build()

    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("help", help_cmd))
    app.add_handler(CommandHandler("reset", reset))

    app.add_handler(CommandHandler("menu", menu))
    app.add_handler(CommandHandler("sample", sample))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, menu_text))

    app.add_handler(CommandHandler("budget", set_budget))
    app.add_handler(CommandHandler("calories", set_calories))
    app.add_handler(CommandHandler("hunger", set_hunger))
    app.add_handler(CommandHandler("combo", set_combo))
    app.add_handler(CommandHandler("diet", diet))
    app.add_handler(CallbackQueryHandler(choose_diet, pattern="^diet_"))
    app.add_handler(CommandHandler("settings", settings))

    app.add_handler(CommandHandler("items", items))
    app.add_handler(CommandHandler("recommend", run_recommender))

    app.run_polling(allowed_updates=Update.ALL_TYPES)

if __name__ == "__main__":
    main()
