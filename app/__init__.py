"""
Permission Letter Service

School permission letters (dispensasi, keterangan, surat tugas, lomba)
- approval workflow
- PDF issuing with QR verification link
- HMAC validation codes checked by a public endpoint
"""

__version__ = "1.0.0"
__author__ = "SMK Informatika PESAT IT Team"
