"""
Reference posts used as style examples for the body stage.
"""

import random
from typing import Dict, List, Optional


VIRAL_POSTS: List[Dict[str, str]] = [
    {
        "intent": "viral",
        "length": "short",
        "body": (
            "Unpopular opinion: meeting tanpa agenda itu bukan meeting.\n\n"
            "Itu ngobrol yang dibayar.\n\n"
            "Minggu lalu aku hapus 6 meeting rutin.\n"
            "Hasilnya? 9 jam kembali ke kalender.\n\n"
            "Tidak ada yang protes. Tidak ada yang kangen."
        ),
    },
    {
        "intent": "viral",
        "length": "medium",
        "body": (
            "Niatnya cuma login sebentar, sadar-sadar sudah 4 jam.\n\n"
            "Aku hitung: 28 jam seminggu habis di scroll.\n"
            "Itu lebih dari setengah jam kerja.\n\n"
            "Jadi aku coba satu aturan sederhana:\n"
            "Aplikasi sosial hanya boleh dibuka setelah jam 7 malam.\n\n"
            "Minggu pertama berat.\n"
            "Minggu kedua aku selesai baca 2 buku.\n\n"
            "Fokus itu bukan bakat. Fokus itu lingkungan yang kita desain."
        ),
    },
    {
        "intent": "viral",
        "length": "long",
        "body": (
            "Saya pernah menolak promosi.\n\n"
            "Semua orang bilang itu keputusan bodoh.\n\n"
            "Tapi ada 3 hal yang saya lihat saat itu:\n"
            "1. Tim saya belum siap ditinggal.\n"
            "2. Skill yang dibutuhkan di posisi baru belum saya punya.\n"
            "3. Gaji naik, tapi waktu untuk keluarga hilang.\n\n"
            "Dua tahun kemudian, posisi yang sama ditawarkan lagi.\n"
            "Kali ini saya siap. Tim saya juga siap.\n\n"
            "Karier bukan lomba lari. Karier itu maraton dengan banyak tikungan.\n\n"
            "Kadang langkah mundur adalah cara paling cepat untuk maju."
        ),
    },
    {
        "intent": "educational",
        "length": "short",
        "body": (
            "3 prompt AI yang menghemat 5 jam kerja saya minggu ini:\n\n"
            "✅ Ringkas email panjang jadi 3 poin aksi.\n"
            "✅ Ubah catatan meeting jadi daftar tugas.\n"
            "✅ Buat draf laporan dari data mentah.\n\n"
            "AI tidak menggantikan kita. AI menggantikan pekerjaan yang membosankan."
        ),
    },
    {
        "intent": "educational",
        "length": "medium",
        "body": (
            "Marketing dengan AI bukan soal tools.\n\n"
            "Ini soal proses.\n\n"
            "Tim kami dulu butuh 2 minggu untuk satu kampanye.\n"
            "Sekarang 3 hari.\n\n"
            "Yang berubah:\n"
            "🎯 Riset audiens dibantu AI dalam 1 jam.\n"
            "💡 Variasi copy dibuat 20 versi sekaligus.\n"
            "✅ A/B test dimulai di hari kedua.\n\n"
            "Tools-nya murah. Disiplin prosesnya yang mahal."
        ),
    },
    {
        "intent": "educational",
        "length": "long",
        "body": (
            "Banyak yang tanya: bagaimana memulai karier di data?\n\n"
            "Ini roadmap yang saya pakai 5 tahun lalu:\n\n"
            "1️⃣ Kuasai Excel sampai pivot table terasa mudah.\n"
            "2️⃣ Belajar SQL. Bukan teori, tapi query data nyata.\n"
            "3️⃣ Pilih satu tool visualisasi dan buat 3 dashboard.\n"
            "4️⃣ Tulis insight, bukan hanya grafik.\n\n"
            "Kesalahan terbesar saya? Terlalu lama belajar Python sebelum paham bisnisnya.\n\n"
            "Data tanpa konteks hanyalah angka.\n"
            "Konteks tanpa data hanyalah opini.\n\n"
            "Mulai dari pertanyaan bisnis, baru cari datanya."
        ),
    },
    {
        "intent": "storytelling",
        "length": "medium",
        "body": (
            "Hari pertama kerja, saya salah kirim email ke seluruh kantor.\n\n"
            "Isinya draf presentasi yang penuh typo.\n\n"
            "Saya pikir karier saya selesai.\n\n"
            "Tapi manajer saya cuma bilang:\n"
            '"Sekarang semua orang tahu namamu. Pastikan presentasi finalnya bagus."\n\n'
            "Presentasi itu jadi yang paling banyak dihadiri bulan itu.\n\n"
            "Kesalahan bukan akhir cerita. Cara kita merespons yang menentukan."
        ),
    },
]


def get_viral_context(
    count: int = 2,
    intent: Optional[str] = "viral",
    length: Optional[str] = "medium",
    rng: Optional[random.Random] = None,
) -> List[Dict[str, str]]:
    """Pick style references, relaxing the intent/length filter until something matches."""
    def _matches(post: Dict[str, str], use_intent: bool, use_length: bool) -> bool:
        if use_intent and intent and post["intent"] != intent:
            return False
        if use_length and length and post["length"] != length:
            return False
        return True

    pool: List[Dict[str, str]] = []
    for use_intent, use_length in ((True, True), (False, True), (True, False)):
        pool = [p for p in VIRAL_POSTS if _matches(p, use_intent, use_length)]
        if pool:
            break
    if not pool:
        pool = list(VIRAL_POSTS)

    picker = rng or random
    return picker.sample(pool, min(max(0, count), len(pool)))
