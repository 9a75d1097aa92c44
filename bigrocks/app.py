from __future__ import annotations

import argparse
import random
import tkinter as tk
from datetime import datetime
from tkinter import messagebox, ttk
from tkinter.scrolledtext import ScrolledText

from PIL import ImageTk

from . import __version__
from .chart import render_app_icon, render_completion_ring
from .database import BigRocksDatabase
from .engine import PromptEngine
from .log import get_logger
from .models import Prompting, Snapshot, SummaryPending
from .paths import database_path, ensure_directories
from .settings import MAX_INPUT_FALLBACK, MIN_INPUT_FALLBACK, parse_count
from .stats import CLI_RANGE_NAMES, TimeRange

logger = get_logger(__name__)

# Spacing between prompts while the window is open, in minutes.
PROMPT_DELAY_MINUTES = (20, 90)
DAY_CHECK_INTERVAL_MS = 60_000

ABOUT_TEXT = (
    "This app helps you focus on what's most important in your life. "
    "Make a list of the activities that matter most to you.\n\n"
    "Each item should only take a few moments to complete, so that what is "
    "truly important can become part of your day.\n\n"
    "The app will prompt you at random times during the day to take a break "
    "and focus on what matters most to you."
)


class BigRocksApp(tk.Tk):
    def __init__(self, engine: PromptEngine, rng: random.Random | None = None):
        super().__init__()
        self.title("Big Rocks")
        self.geometry("460x720")
        self.minsize(380, 600)

        self.engine = engine
        self._rng = rng or random.Random()
        self._image_refs: dict[str, ImageTk.PhotoImage] = {}
        self._prompt_job: str | None = None

        self._image_refs["window_icon"] = ImageTk.PhotoImage(render_app_icon(64))
        try:
            self.iconphoto(True, self._image_refs["window_icon"])
        except tk.TclError:
            pass

        self.new_activity_var = tk.StringVar()
        self.min_var = tk.StringVar()
        self.max_var = tk.StringVar()
        self.range_var = tk.StringVar(value=TimeRange.ALL_TIME.value)
        self.status_var = tk.StringVar(value="")
        self.stats_var = tk.StringVar(value="")

        self._build_shell()

        did_roll = self.engine.start()
        self._append_log("Big Rocks started." + (" New day." if did_roll else ""))
        self._refresh_all()
        if not self.engine.snapshot().has_seen_onboarding:
            self.after(200, lambda: self._show_about(first_run=True))

        self.bind("<Map>", self._on_resumed)
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._schedule_next_prompt()
        self.after(DAY_CHECK_INTERVAL_MS, self._check_day)

    def _build_shell(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)

        notebook = ttk.Notebook(self)
        notebook.grid(row=0, column=0, sticky="nsew")
        self.notebook = notebook

        self.home_tab = ttk.Frame(notebook, padding=12)
        self.settings_tab = ttk.Frame(notebook, padding=12)
        notebook.add(self.home_tab, text="Activities")
        notebook.add(self.settings_tab, text="Settings")

        self._build_home()
        self._build_settings()

        self.log_output = ScrolledText(self, height=5, state="disabled", wrap="word")
        self.log_output.grid(row=1, column=0, sticky="ew", padx=8, pady=(0, 8))

    def _build_home(self) -> None:
        tab = self.home_tab
        tab.columnconfigure(0, weight=1)
        tab.rowconfigure(1, weight=1)

        ttk.Label(tab, textvariable=self.status_var, font=("Segoe UI", 11, "bold")).grid(
            row=0, column=0, sticky="w", pady=(0, 8)
        )

        self.home_body = ttk.Frame(tab)
        self.home_body.grid(row=1, column=0, sticky="nsew")
        self.home_body.columnconfigure(0, weight=1)
        self.home_body.rowconfigure(0, weight=1)

        self.prompt_frame = ttk.Frame(self.home_body)
        self.prompt_label = ttk.Label(self.prompt_frame, text="", wraplength=380, font=("Segoe UI", 18))
        self.prompt_label.pack(pady=(40, 12))
        ttk.Label(self.prompt_frame, text="Did you complete this activity?").pack(pady=(0, 24))
        ttk.Button(self.prompt_frame, text="Yes, I did it", command=lambda: self._respond(True)).pack(fill="x", pady=4)
        ttk.Button(self.prompt_frame, text="No, not this time", command=lambda: self._respond(False)).pack(fill="x", pady=4)

        self.summary_frame = ttk.Frame(self.home_body)
        ttk.Label(self.summary_frame, text="Day Complete", font=("Segoe UI", 18)).pack(pady=(30, 4))
        ttk.Label(self.summary_frame, text="Here is your summary for today.").pack(pady=(0, 12))
        self.summary_chart = ttk.Label(self.summary_frame)
        self.summary_chart.pack(pady=8)
        self.summary_label = ttk.Label(self.summary_frame, text="", font=("Segoe UI", 22, "bold"))
        self.summary_label.pack(pady=8)
        ttk.Button(self.summary_frame, text="Close Summary", command=self._dismiss_summary).pack(fill="x", pady=8)

        self.list_frame = ttk.Frame(self.home_body)
        self.list_frame.columnconfigure(0, weight=1)
        self.list_frame.rowconfigure(1, weight=1)
        entry_row = ttk.Frame(self.list_frame)
        entry_row.grid(row=0, column=0, sticky="ew", pady=(0, 8))
        entry_row.columnconfigure(0, weight=1)
        entry = ttk.Entry(entry_row, textvariable=self.new_activity_var)
        entry.grid(row=0, column=0, sticky="ew", padx=(0, 6))
        entry.bind("<Return>", lambda _event: self._add_activity())
        ttk.Button(entry_row, text="Add", command=self._add_activity).grid(row=0, column=1)

        self.activity_list = tk.Listbox(self.list_frame, activestyle="none", height=12)
        self.activity_list.grid(row=1, column=0, sticky="nsew")
        buttons = ttk.Frame(self.list_frame)
        buttons.grid(row=2, column=0, sticky="ew", pady=(8, 0))
        ttk.Button(buttons, text="Delete selected", command=self._delete_selected).pack(side="left")
        ttk.Button(buttons, text="Prompt me now", command=self._trigger).pack(side="right")
        self._activity_ids: list[str] = []

    def _build_settings(self) -> None:
        tab = self.settings_tab
        tab.columnconfigure(1, weight=1)

        ttk.Label(tab, text="Daily Notifications", font=("Segoe UI", 11, "bold")).grid(
            row=0, column=0, columnspan=3, sticky="w", pady=(0, 8)
        )
        ttk.Label(tab, text="Minimum").grid(row=1, column=0, sticky="w")
        ttk.Spinbox(tab, from_=1, to=98, width=6, textvariable=self.min_var, command=self._save_min).grid(
            row=1, column=1, sticky="w"
        )
        ttk.Label(tab, text="Maximum").grid(row=2, column=0, sticky="w")
        ttk.Spinbox(tab, from_=2, to=99, width=6, textvariable=self.max_var, command=self._save_max).grid(
            row=2, column=1, sticky="w"
        )
        ttk.Button(tab, text="Save", command=self._save_settings).grid(row=1, column=2, rowspan=2)

        ttk.Label(tab, text="Statistics", font=("Segoe UI", 11, "bold")).grid(
            row=3, column=0, columnspan=3, sticky="w", pady=(20, 8)
        )
        ranges = ttk.Frame(tab)
        ranges.grid(row=4, column=0, columnspan=3, sticky="w")
        for time_range in TimeRange:
            ttk.Radiobutton(
                ranges,
                text=time_range.value,
                value=time_range.value,
                variable=self.range_var,
                command=self._render_stats,
            ).pack(side="left", padx=(0, 6))

        self.stats_chart = ttk.Label(tab)
        self.stats_chart.grid(row=5, column=0, columnspan=3, pady=12)
        ttk.Label(tab, textvariable=self.stats_var).grid(row=6, column=0, columnspan=3)
        ttk.Button(tab, text="About", command=self._show_about).grid(row=7, column=0, columnspan=3, pady=(24, 0))

    def _refresh_all(self) -> None:
        snapshot = self.engine.snapshot()
        self._render_home(snapshot)
        self.min_var.set(str(snapshot.settings.min_notifications))
        self.max_var.set(str(snapshot.settings.max_notifications))
        self._render_stats()

    def _render_home(self, snapshot: Snapshot) -> None:
        for frame in (self.prompt_frame, self.summary_frame, self.list_frame):
            frame.grid_forget()

        prompt = snapshot.prompt
        if isinstance(prompt, SummaryPending) and snapshot.summary is not None:
            self.status_var.set("Day complete")
            self._image_refs["summary_chart"] = ImageTk.PhotoImage(render_completion_ring(snapshot.summary))
            self.summary_chart.configure(image=self._image_refs["summary_chart"])
            self.summary_label.configure(text=f"{snapshot.summary.percentage}%")
            self.summary_frame.grid(row=0, column=0, sticky="nsew")
            return

        if isinstance(prompt, Prompting):
            self.status_var.set("Happening now")
            self.prompt_label.configure(text=prompt.activity.text)
            self.prompt_frame.grid(row=0, column=0, sticky="nsew")
            return

        settings = snapshot.settings
        self.status_var.set(
            f"My Big Rocks: {snapshot.prompts_answered_today} of {settings.notifications_today} prompts today"
        )
        self.activity_list.delete(0, "end")
        self._activity_ids = [activity.id for activity in snapshot.activities]
        for activity in snapshot.activities:
            self.activity_list.insert("end", activity.text)
        if not snapshot.activities:
            self.activity_list.insert("end", "No activities yet. Add one to get started.")
        self.list_frame.grid(row=0, column=0, sticky="nsew")

    def _render_stats(self) -> None:
        time_range = TimeRange(self.range_var.get())
        stats = self.engine.stats_for(time_range)
        self._image_refs["stats_chart"] = ImageTk.PhotoImage(render_completion_ring(stats, size=140))
        self.stats_chart.configure(image=self._image_refs["stats_chart"])
        if stats.total:
            self.stats_var.set(f"{stats.percentage}% completed ({stats.completed} of {stats.total})")
        else:
            self.stats_var.set("No data for this period")

    def _add_activity(self) -> None:
        activity = self.engine.add_activity(self.new_activity_var.get())
        if activity is None:
            return
        self.new_activity_var.set("")
        self._append_log(f"Added activity: {activity.text}")
        self._refresh_all()

    def _delete_selected(self) -> None:
        selection = self.activity_list.curselection()
        if not selection or selection[0] >= len(self._activity_ids):
            return
        activity_id = self._activity_ids[selection[0]]
        if self.engine.delete_activity(activity_id):
            self._append_log("Activity deleted.")
        self._refresh_all()

    def _trigger(self) -> None:
        before = self.engine.snapshot().prompt
        self.engine.trigger()
        after = self.engine.snapshot().prompt
        if after != before:
            if isinstance(after, Prompting):
                self._append_log(f"Prompt: {after.activity.text}")
            elif isinstance(after, SummaryPending):
                self._append_log("Daily quota reached; showing summary.")
            self._bring_to_front()
        self._refresh_all()

    def _respond(self, completed: bool) -> None:
        entry = self.engine.respond(completed)
        if entry is not None:
            self._append_log(f"{'Completed' if completed else 'Missed'}: {entry.activity_text}")
        self._refresh_all()

    def _dismiss_summary(self) -> None:
        self.engine.dismiss_summary()
        self._refresh_all()

    def _save_min(self) -> None:
        self.engine.update_settings(min_notifications=parse_count(self.min_var.get(), MIN_INPUT_FALLBACK))
        self._refresh_all()

    def _save_max(self) -> None:
        self.engine.update_settings(max_notifications=parse_count(self.max_var.get(), MAX_INPUT_FALLBACK))
        self._refresh_all()

    def _save_settings(self) -> None:
        self.engine.update_settings(
            min_notifications=parse_count(self.min_var.get(), MIN_INPUT_FALLBACK),
            max_notifications=parse_count(self.max_var.get(), MAX_INPUT_FALLBACK),
        )
        self._refresh_all()
        settings = self.engine.snapshot().settings
        self._append_log(
            f"Settings saved: between {settings.min_notifications} and {settings.max_notifications} prompts daily."
        )

    def _show_about(self, first_run: bool = False) -> None:
        title = "Welcome to Big Rocks" if first_run else "About Big Rocks"
        messagebox.showinfo(title, ABOUT_TEXT, parent=self)
        self.engine.dismiss_onboarding()

    def _schedule_next_prompt(self) -> None:
        low, high = PROMPT_DELAY_MINUTES
        delay_ms = int(self._rng.uniform(low, high) * 60_000)
        self._prompt_job = self.after(delay_ms, self._on_prompt_timer)

    def _on_prompt_timer(self) -> None:
        try:
            self._trigger()
        finally:
            self._schedule_next_prompt()

    def _check_day(self) -> None:
        try:
            if self.engine.app_resumed():
                self._append_log("New day started.")
                self._refresh_all()
        finally:
            self.after(DAY_CHECK_INTERVAL_MS, self._check_day)

    def _on_resumed(self, event=None) -> None:
        if event is not None and event.widget is not self:
            return
        if self.engine.app_resumed():
            self._append_log("New day started.")
            self._refresh_all()

    def _bring_to_front(self) -> None:
        self.deiconify()
        self.lift()
        self.notebook.select(self.home_tab)

    def _on_close(self) -> None:
        if self._prompt_job is not None:
            self.after_cancel(self._prompt_job)
        self.destroy()

    def _append_log(self, message: str) -> None:
        logger.info(message)
        self.log_output.configure(state="normal")
        self.log_output.insert("end", f"[{_now_stamp()}] {message}\n")
        self.log_output.see("end")
        self.log_output.configure(state="disabled")


def _now_stamp() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _format_snapshot(snapshot: Snapshot) -> str:
    settings = snapshot.settings
    lines = [
        f"day={snapshot.today} quota={settings.notifications_today} "
        f"range={settings.min_notifications}-{settings.max_notifications} "
        f"answered={snapshot.prompts_answered_today}",
    ]
    prompt = snapshot.prompt
    if isinstance(prompt, Prompting):
        lines.append(f"prompting={prompt.activity.id} {prompt.activity.text}")
    elif isinstance(prompt, SummaryPending) and snapshot.summary is not None:
        summary = snapshot.summary
        lines.append(f"summary={summary.percentage}% ({summary.completed}/{summary.total})")
    else:
        lines.append("idle")
    for entry in snapshot.recent_logs:
        mark = "yes" if entry.completed else "no"
        lines.append(f"  {entry.timestamp.strftime('%Y-%m-%d %H:%M')} {mark:<3} {entry.activity_text}")
    return "\n".join(lines)


def _open_engine() -> PromptEngine:
    ensure_directories()
    engine = PromptEngine(BigRocksDatabase(database_path()))
    engine.start()
    return engine


def _run_cli(args: argparse.Namespace) -> int:
    engine = _open_engine()

    if args.add:
        activity = engine.add_activity(args.add)
        if activity is None:
            print("activity text is empty")
            return 1
        print(f"added={activity.id} {activity.text}")
    if args.delete:
        if not engine.delete_activity(args.delete):
            print(f"unknown activity {args.delete}")
            return 1
        print(f"deleted={args.delete}")
    if args.min is not None or args.max is not None:
        engine.update_settings(min_notifications=args.min, max_notifications=args.max)
    if args.trigger:
        engine.trigger()
    if args.respond:
        entry = engine.respond(args.respond == "yes")
        if entry is None:
            print("no prompt is waiting for a response")
    if args.dismiss_summary:
        engine.dismiss_summary()
    if args.list:
        for activity in engine.snapshot().activities:
            print(f"{activity.id}\t{activity.text}")
    if args.stats:
        stats = engine.stats_for(CLI_RANGE_NAMES[args.stats])
        print(f"completed={stats.completed} total={stats.total} percentage={stats.percentage}")
    if args.status or args.trigger or args.respond or args.dismiss_summary:
        print(_format_snapshot(engine.snapshot()))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bigrocks")
    parser.add_argument("--version", action="store_true", help="Print app version and exit")
    parser.add_argument("--status", action="store_true", help="Print the current state")
    parser.add_argument("--list", action="store_true", help="List activities")
    parser.add_argument("--add", metavar="TEXT", help="Add an activity")
    parser.add_argument("--delete", metavar="ID", help="Delete an activity")
    parser.add_argument("--trigger", action="store_true", help="Fire the next prompt")
    parser.add_argument("--respond", choices=("yes", "no"), help="Answer the current prompt")
    parser.add_argument("--dismiss-summary", action="store_true", help="Close the daily summary")
    parser.add_argument("--min", type=int, help="Minimum prompts per day")
    parser.add_argument("--max", type=int, help="Maximum prompts per day")
    parser.add_argument("--stats", choices=sorted(CLI_RANGE_NAMES), help="Print completion statistics")
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    cli_requested = any(
        [
            args.status,
            args.list,
            args.add,
            args.delete,
            args.trigger,
            args.respond,
            args.dismiss_summary,
            args.min is not None,
            args.max is not None,
            args.stats,
        ]
    )
    if cli_requested:
        return _run_cli(args)

    ensure_directories()
    app = BigRocksApp(PromptEngine(BigRocksDatabase(database_path())))
    app.mainloop()
    return 0
