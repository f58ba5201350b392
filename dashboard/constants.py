TASK_STATUSES = ["todo", "doing", "done"]
TASK_PRIORITIES = {1: "High", 2: "Medium", 3: "Low"}
HABIT_CADENCES = ["daily", "weekly"]
CARD_PRIORITIES = ["P0", "P1", "P2", "P3"]
ABSENCE_TYPES = ["personal", "sick", "permission"]

DEFAULT_TASK_PRIORITY = 2
DEFAULT_TASK_CREDITS = 5
DEFAULT_HABIT_CREDITS = 2
DEFAULT_CARD_PRIORITY = "P2"

DEFAULT_HUBS = [
    {"title": "Academics", "slug": "academics", "icon": "graduation-cap", "color": "hub-academics"},
    {"title": "Tech", "slug": "tech", "icon": "code", "color": "hub-tech"},
    {"title": "Fitness", "slug": "fitness", "icon": "dumbbell", "color": "hub-fitness"},
    {"title": "Relationships", "slug": "relationships", "icon": "heart", "color": "hub-relationships"},
    {"title": "Personal", "slug": "personal", "icon": "user", "color": "hub-personal"},
]
HUB_COLORS = {
    "hub-academics": "#6C8EF5",
    "hub-tech": "#22B8CF",
    "hub-fitness": "#40C057",
    "hub-relationships": "#F06595",
    "hub-personal": "#FAB005",
}

DEFAULT_BOARD_NAME = "My Board"
DEFAULT_LISTS = ["Backlog", "To Do", "Doing", "Done"]

LIFE_SCORE_WEIGHTS = {
    "tasks": 0.40,
    "habits": 0.30,
    "events": 0.15,
    "mood": 0.15,
}
LIFE_SCORE_EVENTS_PLACEHOLDER = 80
LIFE_SCORE_MOOD_PLACEHOLDER = 75

ATTENDANCE_CSV_HEADERS = ["Date", "Went to College", "Absence Type", "Note", "Completed Tasks"]

HUBS_TABLE = "hubs"
TASKS_TABLE = "tasks"
HABITS_TABLE = "habits"
BOARDS_TABLE = "boards"
LISTS_TABLE = "lists"
CARDS_TABLE = "cards"
SUBTASKS_TABLE = "subtasks"
CALENDAR_DAYS_TABLE = "calendar_days"
PLANNED_TASKS_TABLE = "planned_tasks"
CREDITS_TABLE = "credits_transactions"
PURCHASES_TABLE = "user_purchases"
THEMES_TABLE = "themes"
