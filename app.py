from src.attendance_sync.attendance_sync.main import create_app

app = create_app()

if __name__ == "__main__":
    # Reloader would start a second scheduler thread
    app.run(debug=app.config["DEBUG"], use_reloader=False)
