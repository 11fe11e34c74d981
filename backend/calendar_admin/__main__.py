from calendar_admin.main import run

run()
