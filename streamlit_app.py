"""Single-file entrypoint for hosts that expect ``streamlit_app.py``.

Running ``streamlit run streamlit_app.py`` renders the Home page; the
multipage navigation still picks up the ``pages/`` directory.
"""

from Home import main


if __name__ == "__main__":
    main()
