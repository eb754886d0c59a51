"""
Main FastAPI Application - Medical Report Structuring Service
Accepts a PDF lab report and returns patient info and test results as JSON
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from medreport.pdf_extractor import PDFTextExtractor
from medreport.model_context import ProcessingContext
from medreport.pipeline import INVALID_TYPE_ERROR, process_upload
from medreport.settings import Settings
from medreport.text_structurer import MedicalTextStructurer

settings = Settings.from_env()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Medical Report Structuring API",
    description="Extract patient details and test results from PDF lab reports",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------- Initialize components (stateless, shared across requests) ----------
pdf_extractor = PDFTextExtractor.from_settings(settings)
text_structurer = MedicalTextStructurer.from_settings(settings)

# ---------- Routes ----------
@app.get("/", response_class=HTMLResponse)
async def root():
    html = """<!DOCTYPE html><html><head><title>Medical Report Upload</title>
    <style>
    body{font-family:Arial;margin:40px;background:#f5f5f5}
    .container{max-width:860px;margin:0 auto;background:#fff;padding:30px;border-radius:8px;box-shadow:0 2px 10px rgba(0,0,0,0.08)}
    .upload{border:2px dashed #c8c8c8;padding:30px;text-align:center;border-radius:8px}
    button{background:#2563eb;color:#fff;padding:12px 20px;border:0;border-radius:6px;cursor:pointer}
    .result{margin-top:24px;padding:16px;background:#fafafa;border-radius:6px}
    .err{color:#991b1b;background:#fee2e2;padding:8px 12px;border-radius:4px;display:inline-block}
    table{width:100%;border-collapse:collapse;margin-top:10px}
    th,td{border:1px solid #ddd;padding:8px}
    th{background:#f0f0f0}
    pre{background:#f7f7f7;padding:10px;border-radius:4px;overflow:auto}
    .note{color:#555;font-size:13px}
    </style></head><body><div class="container">
    <h2>Medical Report Upload</h2>
    <form id="form" enctype="multipart/form-data"><div class="upload">
    <input type="file" id="file" name="file" accept="application/pdf" required /><br/><br/>
    <button type="submit">Process Report</button></div></form>
    <p class="note">Test-result tables are read line by line. Start the service with PDF_LINE_BREAKS=1 to keep the PDF's line breaks; otherwise each page is one line and only patient details are extracted.</p>
    <div id="loading" style="display:none;">Processing...</div><div id="result"></div>
    </div>
    <script>
    const form=document.getElementById('form');
    form.addEventListener('submit',async(e)=>{
      e.preventDefault();
      const file=document.getElementById('file').files[0];
      if(!file) return alert('Please select a file');
      const result=document.getElementById('result');
      const loading=document.getElementById('loading');
      loading.style.display='block'; result.innerHTML='';
      const fd=new FormData(); fd.append('file',file);
      try{
        const r=await fetch('/api/upload',{method:'POST',body:fd});
        const body=await r.json(); if(!r.ok) throw new Error(body.error||'Error');
        const data=body.data||{};
        let html='<div class="result">';
        if(data.patientInfo){
          html+='<h4>Patient Information</h4>';
          for(const [k,v] of Object.entries(data.patientInfo)) html+=`<div>${k}: ${v}</div>`;
        }
        const t=data.testResults;
        if(t&&t.investigation.length){
          html+='<h4>Test Results</h4><table><tr><th>Investigation</th><th>Observed Value</th><th>Unit</th><th>Ref. Interval</th></tr>';
          t.investigation.forEach((name,i)=>{
            html+=`<tr><td>${name}</td><td>${t.observedValue[i]||'-'}</td><td>${t.unit[i]||'-'}</td><td>${t.biologicalRefInterval[i]||'-'}</td></tr>`;
          });
          html+='</table>';
        }
        html+='<h4>JSON</h4><pre>'+JSON.stringify(data,null,2)+'</pre></div>';
        result.innerHTML=html;
      }catch(err){
        result.innerHTML=`<div class="err">Error: ${err.message}</div>`;
      }finally{
        loading.style.display='none';
      }
    });
    </script></body></html>"""
    return html

@app.post("/api/upload")
async def upload_report(file: Optional[UploadFile] = File(None)):
    if file is None:
        return JSONResponse(dict(INVALID_TYPE_ERROR), status_code=400)

    data = await file.read()
    logger.info("Upload received: %s (%s, %d bytes)", file.filename, file.content_type, len(data))
    status, payload = await run_in_threadpool(
        process_upload, data, file.content_type, settings,
        extractor=pdf_extractor, structurer=text_structurer,
    )
    return JSONResponse(payload, status_code=status)

def model_status():
    with ProcessingContext(enable_model=settings.enable_model) as ctx:
        model = ctx.ensure_model()
        return {
            "enabled": settings.enable_model,
            "loaded": model is not None and model.is_loaded,
            "trained": model is not None and model.is_trained,
        }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "components": {
            "pdf_extractor": "ready",
            "text_structurer": "ready",
            "model": model_status(),
            "line_breaks": settings.keep_line_breaks,
        }
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
