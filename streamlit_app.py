# streamlit_app.py
import os
import requests
import streamlit as st
from dotenv import load_dotenv, find_dotenv

from moodify.mood_profiles import HOBBIES, LISTENING_TIMES, MOODS, TEMPO_PREFERENCES

# ----------------------------------
# Env / config
# ----------------------------------
load_dotenv(find_dotenv(), override=False)

API_BASE = os.getenv("MOODIFY_API_BASE", "http://127.0.0.1:8000")

st.set_page_config(page_title="🎵 Moodify", page_icon="🎧", layout="wide")

st.markdown("""
<style>
:root { --primary:#1DB954; --bg:#121212; --card-bg:#1e1e1e; --text:#fff; --text-2:#b3b3b3; --br:10px;}
.stApp { background:var(--bg); color:var(--text); }
.stButton button{ background:var(--primary); color:#fff; border:none; border-radius:var(--br); font-weight:600; width:100%; }
.badge{ display:inline-block; background:rgba(255,255,255,0.08); border:1px solid rgba(255,255,255,0.12);
  color:var(--text-2); border-radius:999px; padding:.28rem .6rem; font-size:.85rem; margin-right:.35rem; }
.track iframe{ width:100%; height:80px; border-radius:var(--br); }
</style>
""", unsafe_allow_html=True)

st.markdown("<h1 style='text-align:center;color:#1DB954;'>Moodify</h1>", unsafe_allow_html=True)
st.markdown("<p style='text-align:center;color:#b3b3b3;'>Mood + words + hobbies → a playlist that fits ✨</p>", unsafe_allow_html=True)

# ----------------------------------
# Session (sid arrives as ?sid=... after the Spotify callback)
# ----------------------------------
sid_param = st.query_params.get("sid")
if sid_param:
    st.session_state.sid = sid_param
sid = st.session_state.get("sid", "")


def api(method: str, path: str, **kwargs):
    """Call the Moodify API; returns (json | None, error message | None)."""
    try:
        r = requests.request(
            method, f"{API_BASE}{path}",
            headers={"X-Session-Id": sid}, timeout=30, **kwargs,
        )
    except requests.RequestException as e:
        return None, str(e)
    if not r.ok:
        try:
            return None, r.json().get("detail") or r.text
        except ValueError:
            return None, r.text
    return r.json(), None


if not sid:
    st.info("Connect your Spotify account to generate playlists.")
    st.link_button("Connect with Spotify", f"{API_BASE}/spotify/login")
    st.stop()

me, err = api("GET", "/spotify/session/me")
if err:
    st.error(f"Session problem: {err}")
    st.stop()
st.caption(f"Logged in as {me.get('display_name') or me.get('spotify_id')}")

# ----------------------------------
# Sidebar inputs
# ----------------------------------
with st.sidebar:
    st.subheader("How are you feeling?")
    mood = st.selectbox("Mood", list(MOODS))
    social_review = st.text_area("Say a few words", placeholder="e.g. long week, but today was great")
    hobbies = st.multiselect("Hobbies", list(HOBBIES))
    genres_raw = st.text_input("Favourite genres (comma separated)")
    artists_raw = st.text_input("Favourite artists (comma separated)")
    listening_time = st.radio("Listening time", list(LISTENING_TIMES), horizontal=True)
    tempo = st.radio("Tempo", list(TEMPO_PREFERENCES), index=1, horizontal=True)
    build_btn = st.button("Generate Playlist", use_container_width=True)

inputs = {
    "mood": mood,
    "social_review": social_review,
    "hobbies": hobbies,
    "genres": [g.strip() for g in genres_raw.split(",") if g.strip()],
    "artists": [a.strip() for a in artists_raw.split(",") if a.strip()],
    "listening_time": listening_time,
    "tempo_preference": tempo,
}

if build_btn:
    with st.spinner("Reading your mood..."):
        data, err = api("POST", "/playlist/generate", json=inputs)
    if err:
        st.error(err)
        st.stop()
    st.session_state.generated = {"inputs": inputs, **data}

generated = st.session_state.get("generated")
if generated:
    analysis = generated["analysis"]
    attrs = analysis["attributes"]
    st.info(analysis["description"])
    st.markdown(
        f"""
        <div>
          <span class="badge">energy {attrs['energy']:.2f}</span>
          <span class="badge">valence {attrs['valence']:.2f}</span>
          <span class="badge">danceability {attrs['danceability']:.2f}</span>
          <span class="badge">tempo {attrs['tempo_range']['min']}–{attrs['tempo_range']['max']} bpm</span>
          <span class="badge">sentiment {analysis['sentiment_score']:.2f}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )
    st.caption("Genres: " + ", ".join(analysis["genres"]))

    tracks = generated.get("tracks") or []
    if not tracks:
        st.error("Spotify returned no results. Try another mood or genre.")
        st.stop()

    with st.form("save"):
        name = st.text_input("Playlist name", value=f"Moodify – {analysis['mood']}")
        public = st.checkbox("Public", value=False)
        if st.form_submit_button("Save to Spotify"):
            saved, err = api("POST", "/playlist/create", json={
                "name": name,
                "description": analysis["description"],
                "tracks": [t["uri"] for t in tracks if t.get("uri")],
                "is_public": public,
                "inputs": generated["inputs"],
                "analysis": analysis,
                "spotify_params": generated["spotify_params"],
            })
            if err:
                st.error(err)
            else:
                st.success(f"Saved! {saved['playlist']['url']}")

    for t in tracks:
        embed = f"https://open.spotify.com/embed/track/{t['id']}?utm_source=generator"
        st.markdown(f"""
        <div class="track"><b>{t['name']}</b> — {t['artists']}
          <iframe src="{embed}" frameborder="0" allow="encrypted-media" loading="lazy"></iframe>
        </div>
        """, unsafe_allow_html=True)

with st.expander("Your saved playlists"):
    data, err = api("GET", "/playlist/history")
    for p in (data or {}).get("playlists", []):
        st.markdown(f"- **{p['name']}** · {p.get('mood') or '—'} · {p['track_count']} tracks · {p['created_at']}")
