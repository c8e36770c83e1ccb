import json
import uuid
from html import escape
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..models.models import EventType, Job, Rep
from ..services.background import best_effort
from ..services.errors import NotFound
from ..services.events import RequestContext, record_event
from ..services.tap_resolver import Destination, load_active_rep, resolve_tap


router = APIRouter(tags=["tap"])


NOT_FOUND_HTML = """
<!doctype html>
<meta charset='utf-8'>
<meta name='viewport' content='width=device-width, initial-scale=1'>
<title>Not found</title>
<h1>Page not found</h1>
<p>This tag isn't linked to an active profile.</p>
"""


def not_found_page() -> HTMLResponse:
    # Same body for malformed, unknown and inactive ids
    return HTMLResponse(content=NOT_FOUND_HTML, status_code=404)


def _link(href: Optional[str], label: str) -> str:
    if not href:
        return ""
    return f"<a class='btn' href='{escape(href, quote=True)}'>{escape(label)}</a>"


def render_profile(rep: Rep) -> str:
    initials = "".join(part[:1] for part in rep.name.split()).upper()[:2]
    photo = (
        f"<img class='avatar' src='{escape(rep.photo_url, quote=True)}' alt='{escape(rep.name, quote=True)}'>"
        if rep.photo_url else f"<div class='avatar'>{escape(initials)}</div>"
    )
    subtitle = " · ".join(escape(x) for x in (rep.title, rep.company) if x)
    links = "".join([
        _link(f"tel:{rep.phone}" if rep.phone else None, "Call"),
        _link(f"mailto:{rep.email}" if rep.email else None, "Email"),
        _link(rep.cal_link, "Book a time"),
        _link(f"/tap/{rep.id}/contact.vcf", "Save Contact"),
    ])
    return f"""
<!doctype html>
<meta charset='utf-8'>
<meta name='viewport' content='width=device-width, initial-scale=1'>
<title>{escape(rep.name)}</title>
<style>
body{{font-family:sans-serif;background:#0f172a;color:#e2e8f0;max-width:420px;margin:auto;padding:24px}}
.avatar{{width:64px;height:64px;border-radius:12px;background:#f97316;display:flex;align-items:center;justify-content:center;font-weight:bold;object-fit:cover}}
.btn{{display:block;margin:8px 0;padding:10px;border:1px solid #f97316;border-radius:12px;color:#fdba74;text-align:center;text-decoration:none}}
input,textarea,button{{display:block;width:100%;margin:6px 0;padding:10px;box-sizing:border-box}}
</style>
{photo}
<h1>{escape(rep.name)}</h1>
<p>{subtitle}</p>
<p>{escape(rep.bio or '')}</p>
{links}
<div id='cta'>
  <h2>Free Roof Inspection</h2>
  <p>Check if your roof qualifies for insurance coverage. No cost, no obligation.</p>
  <button onclick='openForm()'>Request an inspection</button>
</div>
<form id='lead' style='display:none' onsubmit='submitLead(event)'>
  <input id='name' placeholder='Your name' required>
  <input id='phone' placeholder='Phone'>
  <input id='email' type='email' placeholder='Email'>
  <input id='address' placeholder='Property address'>
  <textarea id='notes' placeholder='Notes'></textarea>
  <button>Send</button>
  <p id='err'></p>
</form>
<p id='done' style='display:none'>Thanks! We'll be in touch shortly.</p>
<script>
const REP_ID = {json.dumps(rep.id)};
function track(type, meta){{
  fetch('/events',{{method:'POST',headers:{{'Content-Type':'application/json'}},body:JSON.stringify({{repId:REP_ID,type:type,meta:meta}})}}).catch(()=>{{}});
}}
track('TAP', {{path: location.pathname, redirected: false}});
function openForm(){{ document.getElementById('cta').style.display='none'; document.getElementById('lead').style.display='block'; track('VIEW', {{step:'form'}}); }}
async function submitLead(ev){{
  ev.preventDefault();
  const v = id => document.getElementById(id).value.trim();
  if(!v('name') || (!v('phone') && !v('email'))){{ document.getElementById('err').textContent='Please enter your name and at least a phone or email.'; return; }}
  const r = await fetch('/leads',{{method:'POST',headers:{{'Content-Type':'application/json'}},body:JSON.stringify({{repId:REP_ID,name:v('name'),phone:v('phone'),email:v('email'),address:v('address'),notes:v('notes')}})}});
  if(r.ok){{ document.getElementById('lead').style.display='none'; document.getElementById('done').style.display='block'; }}
  else {{ const j = await r.json().catch(()=>({{}})); document.getElementById('err').textContent = j.error || 'Something went wrong. Please try again.'; }}
}}
</script>
"""


def render_vcard(rep: Rep) -> str:
    def esc(value: str) -> str:
        return value.replace("\\", "\\\\").replace(",", "\\,").replace(";", "\\;").replace("\n", "\\n")

    lines = ["BEGIN:VCARD", "VERSION:3.0", f"FN:{esc(rep.name)}"]
    if rep.company:
        lines.append(f"ORG:{esc(rep.company)}")
    if rep.title:
        lines.append(f"TITLE:{esc(rep.title)}")
    if rep.phone:
        lines.append(f"TEL;TYPE=CELL:{esc(rep.phone)}")
    if rep.email:
        lines.append(f"EMAIL:{esc(rep.email)}")
    lines.append(f"URL:{settings.public_base_url.rstrip('/')}/tap/{rep.id}")
    lines.append("END:VCARD")
    return "\r\n".join(lines) + "\r\n"


@router.get("/tap/{rep_id}", response_class=HTMLResponse)
@router.get("/r/{rep_id}", response_class=HTMLResponse, include_in_schema=False)
def tap(rep_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        resolution = resolve_tap(db, rep_id, RequestContext.from_request(request))
    except NotFound:
        return not_found_page()
    if resolution.destination is Destination.REDIRECT:
        return RedirectResponse(url=resolution.redirect_url, status_code=302)
    return HTMLResponse(content=render_profile(resolution.rep))


@router.get("/tap/{rep_id}/contact.vcf")
def contact_card(rep_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        rep = load_active_rep(db, rep_id)
    except NotFound:
        return not_found_page()
    context = RequestContext.from_request(request)
    best_effort(
        record_event, db, rep.id, EventType.CONTACT_SAVE.value,
        meta={"path": context.path}, user_agent=context.user_agent, ip=context.ip,
    )
    filename = "_".join(rep.name.split()) or f"rep_{rep.id}"
    return Response(
        content=render_vcard(rep),
        media_type="text/vcard",
        headers={"Content-Disposition": f'attachment; filename="{filename}.vcf"'},
    )


@router.get("/job/{job_id}", response_class=HTMLResponse)
def job_record(job_id: str, db: Session = Depends(get_db)):
    try:
        job = db.get(Job, uuid.UUID(job_id))
    except ValueError:
        job = None
    if job is None or not job.is_active:
        return not_found_page()
    rows = [
        ("Address", ", ".join(x for x in (job.address, job.city, job.state) if x)),
        ("Completed", job.completion_date.date().isoformat() if job.completion_date else None),
        ("Shingle", " ".join(x for x in (job.manufacturer, job.shingle_type, job.shingle_color) if x)),
        ("Warranty", f"{job.warranty_years} years" if job.warranty_years else None),
        ("Warranty code", job.warranty_code),
    ]
    body = "".join(f"<tr><th>{escape(k)}</th><td>{escape(v)}</td></tr>" for k, v in rows if v)
    html = f"""
<!doctype html>
<meta charset='utf-8'>
<meta name='viewport' content='width=device-width, initial-scale=1'>
<title>Job record</title>
<h1>Completed installation</h1>
<table>{body}</table>
"""
    return HTMLResponse(content=html)
