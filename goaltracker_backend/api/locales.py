# Messages for API error codes and form validation, in English and Polish.
# A plain dictionary keeps lookups trivial; only two languages are supported.

MESSAGES = {
    "en": {
        # API errors
        "invalid_json": "Request body must be valid JSON",
        "invalid_payload": "Invalid request payload",
        "invalid_query_params": "Invalid query parameters",
        "invalid_path_params": "Invalid path parameters",
        "validation_error": "Request validation failed",
        "not_authenticated": "Authentication required",
        "invalid_credentials": "Invalid email or password",
        "email_already_in_use": "An account with this email already exists",
        "goal_not_found": "The specified goal does not exist or you do not have access to it",
        "parent_goal_not_found": "The parent goal does not exist or you do not have access to it",
        "progress_not_found": "The specified progress entry does not exist or you do not have access to it",
        "goal_locked": "Name, target value and deadline cannot be changed once the goal has progress or is closed",
        "goal_not_closed": "The AI summary can only be edited once the goal is completed or abandoned",
        "goal_has_progress": "A goal with progress entries cannot be deleted",
        "goal_not_active": "This operation requires an active goal",
        "target_not_reached": "The target value has not been reached yet",
        "goal_not_retryable": "Only failed or abandoned goals can be retried",
        "goal_not_continuable": "Only successfully completed goals can be continued",
        "active_goal_exists": "An active goal already exists in this goal's history",
        "goal_not_youngest": "Only the most recent iteration of a goal can be retried or continued",
        "invalid_goal_state": "AI summary can only be generated for completed or abandoned goals (not active)",
        "not_enough_data": "Goal must have at least 3 progress entries to generate AI summary",
        "rate_limited": "Too many AI generation requests. Please try again in {retry_after} seconds.",
        "ai_provider_error": "AI service is temporarily unavailable. Please try again later.",
        "internal_error": "An unexpected error occurred",
        # Form validation
        "name_required": "Name is required.",
        "name_too_long": "Name can be at most {max} characters.",
        "progress_notes_too_long": "Notes can be at most {max} characters.",
        "reflection_notes_too_long": "Note can be at most {max} characters.",
        "ai_summary_too_long": "Summary can be at most {max} characters.",
        "ai_summary_required": "Summary is required.",
        "reason_required": "Reason is required.",
        "reason_too_long": "Reason can be at most {max} characters.",
        "target_value_required": "Target value is required.",
        "target_value_not_positive": "Value must be a positive number.",
        "target_value_not_decimal": "Value must be a valid decimal number.",
        "value_too_precise": "Value can have at most {max} decimal places.",
        "value_too_large": "Value can have at most {max} digits before the decimal point.",
        "deadline_format": "Deadline must be in dd.MM.yyyy format.",
        "deadline_iso_format": "Deadline must be in YYYY-MM-DD format.",
        "invalid_date": "Invalid date.",
        "deadline_not_future": "Deadline must be in the future.",
        "email_required": "Email address is required.",
        "email_invalid": "Enter a valid email address.",
        "password_required": "Password is required.",
        "password_too_short": "Password must be at least {min} characters.",
        "confirm_password_required": "Password confirmation is required.",
        "passwords_do_not_match": "Passwords must match.",
        "at_least_one_field": "At least one field must be provided.",
        "unknown_field": "Unknown field.",
        "invalid_value": "Invalid value.",
    },
    "pl": {
        # API errors
        "invalid_json": "Treść żądania musi być prawidłowym JSON-em",
        "invalid_payload": "Nieprawidłowe dane żądania",
        "invalid_query_params": "Nieprawidłowe parametry zapytania",
        "invalid_path_params": "Nieprawidłowe parametry ścieżki",
        "validation_error": "Walidacja żądania nie powiodła się",
        "not_authenticated": "Wymagane uwierzytelnienie",
        "invalid_credentials": "Nieprawidłowy adres e-mail lub hasło",
        "email_already_in_use": "Konto z tym adresem e-mail już istnieje",
        "goal_not_found": "Wskazany cel nie istnieje lub nie masz do niego dostępu",
        "parent_goal_not_found": "Cel nadrzędny nie istnieje lub nie masz do niego dostępu",
        "progress_not_found": "Wskazany wpis postępu nie istnieje lub nie masz do niego dostępu",
        "goal_locked": "Nazwy, wartości docelowej i terminu nie można zmienić, gdy cel ma postęp lub jest zamknięty",
        "goal_not_closed": "Podsumowanie AI można edytować dopiero po zakończeniu lub porzuceniu celu",
        "goal_has_progress": "Nie można usunąć celu, który ma wpisy postępu",
        "goal_not_active": "Ta operacja wymaga aktywnego celu",
        "target_not_reached": "Wartość docelowa nie została jeszcze osiągnięta",
        "goal_not_retryable": "Ponowić można tylko cel nieudany lub porzucony",
        "goal_not_continuable": "Kontynuować można tylko cel zakończony sukcesem",
        "active_goal_exists": "W historii tego celu istnieje już aktywny cel",
        "goal_not_youngest": "Ponowić lub kontynuować można tylko najnowszą iterację celu",
        "invalid_goal_state": "Podsumowanie AI można wygenerować tylko dla celu zakończonego lub porzuconego",
        "not_enough_data": "Cel musi mieć co najmniej 3 wpisy postępu, aby wygenerować podsumowanie AI",
        "rate_limited": "Zbyt wiele żądań generowania AI. Spróbuj ponownie za {retry_after} s.",
        "ai_provider_error": "Usługa AI jest chwilowo niedostępna. Spróbuj ponownie później.",
        "internal_error": "Wystąpił nieoczekiwany błąd",
        # Form validation
        "name_required": "Nazwa jest wymagana.",
        "name_too_long": "Nazwa może mieć maksymalnie {max} znaków.",
        "progress_notes_too_long": "Notatka może mieć maksymalnie {max} znaków.",
        "reflection_notes_too_long": "Notatka może mieć maksymalnie {max} znaków.",
        "ai_summary_too_long": "Podsumowanie może mieć maksymalnie {max} znaków.",
        "ai_summary_required": "Podsumowanie jest wymagane.",
        "reason_required": "Powód jest wymagany.",
        "reason_too_long": "Powód może mieć maksymalnie {max} znaków.",
        "target_value_required": "Wartość docelowa jest wymagana.",
        "target_value_not_positive": "Wartość musi być liczbą dodatnią.",
        "target_value_not_decimal": "Wartość musi być prawidłową liczbą dziesiętną.",
        "value_too_precise": "Wartość może mieć maksymalnie {max} miejsc po przecinku.",
        "value_too_large": "Wartość może mieć maksymalnie {max} cyfr przed przecinkiem.",
        "deadline_format": "Termin musi być w formacie dd.MM.rrrr.",
        "deadline_iso_format": "Termin musi być w formacie RRRR-MM-DD.",
        "invalid_date": "Nieprawidłowa data.",
        "deadline_not_future": "Termin musi być w przyszłości.",
        "email_required": "Adres e-mail jest wymagany.",
        "email_invalid": "Podaj prawidłowy adres e-mail.",
        "password_required": "Hasło jest wymagane.",
        "password_too_short": "Hasło musi mieć co najmniej {min} znaków.",
        "confirm_password_required": "Potwierdzenie hasła jest wymagane.",
        "passwords_do_not_match": "Hasła muszą być identyczne.",
        "at_least_one_field": "Należy podać co najmniej jedno pole.",
        "unknown_field": "Nieznane pole.",
        "invalid_value": "Nieprawidłowa wartość.",
    }
}

def get_message(key: str, lang: str = "en", **params) -> str:
    """
    Retrieves a translated message for a given key and language.
    Defaults to English if the key is not found in the specified language.
    """
    template = MESSAGES.get(lang, MESSAGES["en"]).get(key, MESSAGES["en"].get(key, key))
    if params:
        return template.format(**params)
    return template
