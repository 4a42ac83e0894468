"""Interface Tkinter principale."""

from __future__ import annotations

import asyncio
import queue
import threading
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Awaitable, Callable, Mapping

import sv_ttk

from authportal.controller import AuthViewController
from authportal.state import Credentials, ViewState

ACCENT_COLOR = "#FF9900"
BACKGROUND_COLOR = "#121212"
CARD_COLOR = "#181818"
STATUS_NEUTRAL_COLOR = "#B3B3B3"
STATUS_ERROR_COLOR = "#F87171"
CARD_WIDTH = 420
POLL_INTERVAL_MS = 50


class FieldBinding:
    """Relie les variables Tk des champs aux credentials du contrôleur.

    Chaque saisie est poussée immédiatement dans le contrôleur ; ``pull``
    recopie l'état vers les champs quand le contrôleur les a modifiés.
    """

    def __init__(self, controller: AuthViewController, variables: Mapping[str, tk.StringVar]) -> None:
        self._controller = controller
        self._variables = variables
        for name, var in variables.items():
            var.trace_add("write", lambda *_, field=name: self._push(field))

    def _push(self, name: str) -> None:
        self._controller.set_field(name, self._variables[name].get())

    def pull(self) -> None:
        credentials = self._controller.state.credentials
        for name, var in self._variables.items():
            value = getattr(credentials, name)
            if var.get() != value:
                var.set(value)


class MainWindow:
    """Fenêtre principale : un formulaire par état de la machine à états.

    La boucle asyncio du contrôleur tourne dans un thread dédié. Les
    changements d'état sont signalés via une file lue périodiquement par Tk.
    """

    def __init__(
        self,
        controller: AuthViewController,
        *,
        config_warning: str | None = None,
    ) -> None:
        self._controller = controller
        self._state = controller.state
        self._config_warning = config_warning

        self._loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._pending: queue.SimpleQueue[None] = queue.SimpleQueue()
        self._unsubscribe = controller.subscribe(lambda: self._pending.put(None))

        self.root = tk.Tk()
        self.root.title("Auth Portal – Cognito")
        self.root.minsize(CARD_WIDTH + 80, 480)

        sv_ttk.set_theme("dark")
        self.root.configure(bg=BACKGROUND_COLOR)
        self._configure_styles()

        self._field_vars = {name: tk.StringVar() for name in Credentials.field_names()}
        self._binding = FieldBinding(controller, self._field_vars)
        self._frames: dict[ViewState, ttk.Frame] = {}
        self._error_labels: list[ttk.Label] = []
        self._busy_buttons: list[ttk.Button] = []
        self._user_vars = {
            "username": tk.StringVar(),
            "email": tk.StringVar(),
            "user_id": tk.StringVar(),
        }

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        self._build_sign_in()
        self._build_sign_up()
        self._build_confirm_sign_up()
        self._build_authenticated()
        self._render()

    # --------------------------------------------------------------------- UI -
    def _configure_styles(self) -> None:
        style = ttk.Style()
        style.configure("Card.TFrame", background=CARD_COLOR)
        style.configure(
            "Heading.TLabel",
            background=CARD_COLOR,
            foreground="#FFFFFF",
            font=("Helvetica", 18, "bold"),
        )
        style.configure(
            "Subtitle.TLabel",
            background=CARD_COLOR,
            foreground=STATUS_NEUTRAL_COLOR,
            font=("Helvetica", 11),
        )
        style.configure(
            "Field.TLabel",
            background=CARD_COLOR,
            foreground="#FFFFFF",
        )
        style.configure(
            "Error.TLabel",
            background=CARD_COLOR,
            foreground=STATUS_ERROR_COLOR,
            font=("Helvetica", 11),
        )
        style.configure("Accent.TButton", font=("Helvetica", 11, "bold"))
        style.map("Accent.TButton", background=[("active", ACCENT_COLOR)])
        style.configure("TButton", padding=(16, 8))
        style.map("TButton", background=[("disabled", "#2B2B2B")])
        style.configure(
            "Link.TButton",
            foreground=ACCENT_COLOR,
            padding=(0, 4),
        )
        self.root.option_add("*Font", "Helvetica 11")

    def _card(self, view: ViewState, title: str, subtitle: str) -> ttk.Frame:
        frame = ttk.Frame(self.root, style="Card.TFrame", padding=(28, 24))
        frame.grid(row=0, column=0)
        frame.columnconfigure(0, weight=1, minsize=CARD_WIDTH)

        ttk.Label(frame, text=title, style="Heading.TLabel").grid(row=0, column=0, sticky="w")
        ttk.Label(frame, text=subtitle, style="Subtitle.TLabel").grid(
            row=1, column=0, sticky="w", pady=(4, 16)
        )

        error_label = ttk.Label(frame, text="", style="Error.TLabel", wraplength=CARD_WIDTH)
        error_label.grid(row=2, column=0, sticky="w", pady=(0, 8))
        self._error_labels.append(error_label)

        self._frames[view] = frame
        return frame

    def _entry(self, parent: ttk.Frame, row: int, label: str, field: str, *, secret: bool = False) -> int:
        ttk.Label(parent, text=label, style="Field.TLabel").grid(row=row, column=0, sticky="w")
        entry = ttk.Entry(
            parent,
            textvariable=self._field_vars[field],
            show="•" if secret else "",
        )
        entry.grid(row=row + 1, column=0, sticky="ew", pady=(2, 12), ipady=4)
        return row + 2

    def _submit_button(
        self,
        parent: ttk.Frame,
        row: int,
        text: str,
        operation: Callable[[], Awaitable[bool]],
    ) -> int:
        button = ttk.Button(
            parent,
            text=text,
            style="Accent.TButton",
            command=lambda: self._submit(operation),
        )
        button.grid(row=row, column=0, sticky="ew", pady=(4, 8))
        self._busy_buttons.append(button)
        return row + 1

    def _link_button(self, parent: ttk.Frame, row: int, text: str, action: Callable[[], None]) -> int:
        button = ttk.Button(
            parent,
            text=text,
            style="Link.TButton",
            command=lambda: self._loop.call_soon_threadsafe(action),
        )
        button.grid(row=row, column=0, sticky="w")
        self._busy_buttons.append(button)
        return row + 1

    def _build_sign_in(self) -> None:
        frame = self._card(ViewState.SIGN_IN, "Connexion", "Connectez-vous avec votre adresse email")
        row = self._entry(frame, 3, "Email", "email")
        row = self._entry(frame, row, "Mot de passe", "password", secret=True)
        row = self._submit_button(frame, row, "Se connecter", self._controller.submit_sign_in)
        self._link_button(frame, row, "Pas encore de compte ? Inscrivez-vous", self._controller.show_sign_up)

    def _build_sign_up(self) -> None:
        frame = self._card(
            ViewState.SIGN_UP,
            "Créer un compte",
            "Créez votre compte avec votre adresse email",
        )
        row = self._entry(frame, 3, "Email", "email")
        row = self._entry(frame, row, "Mot de passe", "password", secret=True)
        row = self._entry(frame, row, "Confirmer le mot de passe", "confirm_password", secret=True)
        row = self._submit_button(frame, row, "S'inscrire", self._controller.submit_sign_up)
        self._link_button(frame, row, "Déjà inscrit ? Connectez-vous", self._controller.show_sign_in)

    def _build_confirm_sign_up(self) -> None:
        frame = self._card(
            ViewState.CONFIRM_SIGN_UP,
            "Confirmez votre email",
            "Saisissez le code de confirmation reçu par email",
        )
        row = self._entry(frame, 3, "Code de confirmation", "verification_code")
        self._submit_button(frame, row, "Confirmer", self._controller.submit_confirmation)

    def _build_authenticated(self) -> None:
        frame = self._card(
            ViewState.AUTHENTICATED,
            "Bienvenue !",
            "Vous êtes authentifié",
        )
        details = ttk.Frame(frame, style="Card.TFrame")
        details.grid(row=3, column=0, sticky="ew", pady=(0, 16))
        for index, (label, key) in enumerate(
            (("Utilisateur", "username"), ("Email", "email"), ("Identifiant", "user_id"))
        ):
            ttk.Label(details, text=f"{label} :", style="Field.TLabel").grid(
                row=index, column=0, sticky="w", padx=(0, 12)
            )
            ttk.Label(details, textvariable=self._user_vars[key], style="Subtitle.TLabel").grid(
                row=index, column=1, sticky="w"
            )

        ttk.Label(
            frame,
            text="Cette page protégée n'est visible que par les utilisateurs authentifiés.",
            style="Subtitle.TLabel",
            wraplength=CARD_WIDTH,
        ).grid(row=4, column=0, sticky="w", pady=(0, 16))
        self._submit_button(frame, 5, "Se déconnecter", self._controller.sign_out)

    # --------------------------------------------------------------- Callbacks -
    def _submit(self, operation: Callable[[], Awaitable[bool]]) -> None:
        if self._state.busy:
            return
        asyncio.run_coroutine_threadsafe(operation(), self._loop)

    def _poll(self) -> None:
        changed = False
        while True:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                break
            changed = True
        if changed:
            self._render()
        self.root.after(POLL_INTERVAL_MS, self._poll)

    def _render(self) -> None:
        """Met à jour l'interface en fonction de l'état courant."""
        for view, frame in self._frames.items():
            if view is self._state.view:
                frame.grid()
            else:
                frame.grid_remove()

        message = self._state.error_message or ""
        for label in self._error_labels:
            label.configure(text=message)

        button_state = tk.DISABLED if self._state.busy else tk.NORMAL
        for button in self._busy_buttons:
            button.configure(state=button_state)

        self._binding.pull()

        user = self._state.session_user
        self._user_vars["username"].set(user.username if user else "")
        self._user_vars["email"].set((user.email or "") if user else "")
        self._user_vars["user_id"].set(user.user_id if user else "")

    # ----------------------------------------------------------------- Public -
    def run(self) -> None:
        self._loop_thread.start()
        asyncio.run_coroutine_threadsafe(self._controller.initialize(), self._loop)
        self.root.after(POLL_INTERVAL_MS, self._poll)

        if self._config_warning:
            messagebox.showwarning("Configuration incomplète", self._config_warning)

        try:
            self.root.mainloop()
        finally:
            self._unsubscribe()
            self._loop.call_soon_threadsafe(self._loop.stop)
