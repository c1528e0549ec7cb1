from aiogram.utils.keyboard import InlineKeyboardBuilder

CONFIRM_CLEAR = "confirm_clear_draws"
CANCEL_CLEAR = "cancel_clear_draws"


def confirm_clear_keyboard():
    keyboard = InlineKeyboardBuilder()
    keyboard.button(text="Yes, delete every draw", callback_data=CONFIRM_CLEAR)
    keyboard.button(text="Cancel", callback_data=CANCEL_CLEAR)
    keyboard.adjust(1)
    return keyboard.as_markup()
