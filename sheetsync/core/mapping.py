# sheetsync/core/mapping.py
#
# Label tables are ordered lists, not dicts: the substring fallback in the
# label mapper walks them top to bottom and the first hit wins.


# ---------------- PROFIT & LOSS ----------------
# (label, key, section)

PL_LABELS = [

    ("penjualan", "penjualan", "revenue"),
    ("diskon penjualan", "diskon_penjualan", "revenue"),
    ("penjualan bersih", "penjualan_bersih", "revenue"),

    ("beban pokok pendapatan", "beban_pokok_pendapatan", "cogs"),

    ("laba bruto", "laba_bruto", "summary"),
    ("total beban", "total_beban", "summary"),

    ("beban penjualan", "beban_penjualan", "beban_penjualan"),
    ("beban iklan dan promosi", "beban_iklan_dan_promosi", "beban_penjualan"),
    ("beban iklan meta", "beban_iklan_meta", "beban_penjualan"),
    ("beban iklan dan admin tiktok", "beban_iklan_tiktok", "beban_penjualan"),
    ("beban iklan mp + cpas", "beban_iklan_mp_cpas", "beban_penjualan"),
    ("beban iklan dan promosi umum", "beban_iklan_promosi_umum", "beban_penjualan"),
    ("beban adm. marketplace", "beban_adm_marketplace", "beban_penjualan"),
    ("beban pengiriman", "beban_pengiriman", "beban_penjualan"),
    ("beban gaji penjualan", "beban_gaji_penjualan", "beban_penjualan"),
    ("beban produksi konten", "beban_produksi_konten", "beban_penjualan"),

    ("beban operasional", "beban_operasional", "beban_operasional"),
    ("beban gaji bod", "beban_gaji_bod", "beban_operasional"),
    ("beban gaji umum dan bpjs", "beban_gaji_umum_bpjs", "beban_operasional"),
    ("beban administrasi dan umum", "beban_adm_umum", "beban_operasional"),
    ("beban kantor", "beban_kantor", "beban_operasional"),
    ("beban lain-lain", "beban_lain_lain", "beban_operasional"),

    ("pendapatan lain-lain", "pendapatan_lain_lain", "pendapatan_lainnya"),

    ("laba / (rugi)", "laba_rugi", "summary"),
    ("beban operasional tanpa gaji", "beban_operasional_tanpa_gaji", "summary"),
]


# ---------------- CASH FLOW ----------------
# (label, key, section, sub_section)

CF_LABELS = [

    # Penerimaan
    ("penerimaan dari pelanggan", "penerimaan_pelanggan", "operasi", "penerimaan"),
    ("refund pelanggan", "refund_pelanggan", "operasi", "penerimaan"),
    ("penerimaan dari reseller", "penerimaan_reseller", "operasi", "penerimaan"),
    ("penerimaan dari direksi (pengembalian pinjaman)", "penerimaan_direksi", "operasi", "penerimaan"),
    ("penerimaan dari karyawan (pengembalian pinjaman)", "penerimaan_karyawan", "operasi", "penerimaan"),

    # Uang muka / pemasok
    ("inventory", "inventory", "operasi", "pembayaran_pemasok"),
    ("packaging", "packaging", "operasi", "pembayaran_pemasok"),
    ("legal & profesional", "legal_profesional", "operasi", "pembayaran_pemasok"),
    ("lainnya", "lainnya", "operasi", "lainnya"),

    # Piutang
    ("piutang karyawan & direksi", "piutang_karyawan_direksi", "operasi", "piutang"),
    ("piutang gts", "piutang_gts", "operasi", "piutang"),
    ("piutang sai", "piutang_sai", "operasi", "piutang"),
    ("piutang esh", "piutang_esh", "operasi", "piutang"),
    ("piutang mpt", "piutang_mpt", "operasi", "piutang"),

    # Pajak
    ("pph 21", "pph_21", "operasi", "pajak"),
    ("pph 22", "pph_22", "operasi", "pajak"),
    ("pph 23", "pph_23", "operasi", "pajak"),
    ("pph 25", "pph_25", "operasi", "pajak"),
    ("pph 26", "pph_26", "operasi", "pajak"),
    ("pph 29", "pph_29", "operasi", "pajak"),
    ("pph 4 (2)", "pph_4_2", "operasi", "pajak"),
    ("pp 23", "pp_23", "operasi", "pajak"),
    ("ppn", "ppn", "operasi", "pajak"),
    ("ppn masukan", "ppn_masukan", "operasi", "pajak"),
    ("pajak kendaraan bermotor", "pajak_kendaraan", "operasi", "pajak"),
    ("pbb", "pbb", "operasi", "pajak"),
    ("denda", "denda", "operasi", "pajak"),
    ("uang muka pajak", "uang_muka_pajak", "operasi", "pajak"),

    # Iklan & promosi
    ("kol & booster", "kol_booster", "operasi", "iklan_promosi"),
    ("tiktok", "iklan_tiktok", "operasi", "iklan_promosi"),
    ("facebook", "iklan_facebook", "operasi", "iklan_promosi"),
    ("shopee ads", "iklan_shopee", "operasi", "iklan_promosi"),
    ("lazada ads", "iklan_lazada", "operasi", "iklan_promosi"),
    ("tokopedia ads", "iklan_tokopedia", "operasi", "iklan_promosi"),

    # Biaya penjualan
    ("biaya produksi konten", "biaya_produksi_konten", "operasi", "biaya_penjualan"),
    ("kurir", "kurir", "operasi", "biaya_penjualan"),
    ("komisi & fee", "komisi_fee", "operasi", "biaya_penjualan"),
    ("biaya admin dan marketplace", "biaya_admin_mp", "operasi", "biaya_penjualan"),

    # Biaya operasional
    ("payroll karyawan, bod dan bpjs", "payroll_total", "operasi", "biaya_operasional"),
    ("thr & bonus", "thr_bonus", "operasi", "biaya_operasional"),
    ("biaya adm & umum", "biaya_adm_umum", "operasi", "biaya_operasional"),
    ("beban kantor", "beban_kantor", "operasi", "biaya_operasional"),

    # Pendapatan & beban lain
    ("pendapatan bunga", "pendapatan_bunga", "operasi", "pendapatan_lainnya"),
    ("pembulatan", "pembulatan", "operasi", "pendapatan_lainnya"),
    ("beban bunga", "beban_bunga", "operasi", "pendapatan_lainnya"),
    ("penerimaan/(pengeluaran) lain-lain", "pendapatan_pengeluaran_lainnya", "operasi", "pendapatan_lainnya"),

    ("arus kas bersih dari aktivitas operasi", "arus_kas_bersih_operasi", "operasi", "summary"),

    # Investasi
    ("penjualan aset tetap", "penjualan_aset_tetap", "investasi", "investasi"),
    ("perolehan aset tetap", "perolehan_aset_tetap", "investasi", "investasi"),
    ("perolehan aset tak berwujud", "perolehan_aset_tak_berwujud", "investasi", "investasi"),
    ("pendanaan proyek", "pendanaan_proyek", "investasi", "investasi"),
    ("pengembalian pokok pendanaan", "pengembalian_pokok_pendanaan", "investasi", "investasi"),
    ("bagi hasil proyek zhu", "bagi_hasil_zhu", "investasi", "investasi"),
    ("arus kas bersih dari aktivitas investasi", "arus_kas_bersih_investasi", "investasi", "summary"),

    # Pendanaan
    ("pembagian dividen", "pembagian_dividen", "pendanaan", "pendanaan"),
    ("modal disetor", "modal_disetor", "pendanaan", "pendanaan"),
    ("pendanaan kkb", "pendanaan_kkb", "pendanaan", "pendanaan"),
    ("arus kas bersih dari aktivitas pendanaan", "arus_kas_bersih_pendanaan", "pendanaan", "summary"),

    # Grand totals
    ("kenaikan (penurunan) bersih kas dan setara kas", "kenaikan_penurunan_kas", "summary", "summary"),
    ("saldo kas dan setara kas awal periode", "saldo_kas_awal", "summary", "saldo"),
    ("saldo kas dan setara kas akhir periode", "saldo_kas_akhir", "summary", "saldo"),
    ("cashflow from operation", "cf_from_operation", "summary", "fcf"),
    ("capital expenditure", "capital_expenditure", "summary", "fcf"),
    ("free cash flow", "free_cash_flow", "summary", "fcf"),
]


# Heading rows: fed to the parent context, never emitted as data
CF_HEADINGS = [
    "LAPORAN ARUS KAS",
    "ARUS KAS DARI",
    "Biaya Penjualan",
    "Biaya Operasional",
    "Pembayaran Pajak",
    "Pembayaran Kepada Pemasok",
    "Pembayaran Uang Muka",
    "Pengembalian Dari Pemasok",
    "Pendapatan & Beban",
    "Iklan & Promosi",
    "Free Cash Flow",
]

# (heading prefix, parent slug)
CF_PARENT_HEADINGS = [
    ("Pembayaran Uang Muka", "uang_muka"),
    ("Pembayaran Kepada Pemasok", "pemasok"),
    ("Pengembalian Dari Pemasok", "pengembalian"),
    ("Pembayaran Pajak", "pajak"),
    ("Iklan & Promosi", "iklan"),
]

CF_PARENT_RESET = "ARUS KAS DARI"

# Generic labels that repeat under several parents
AMBIGUOUS_CF_KEYS = {"inventory", "packaging", "legal_profesional", "lainnya"}


# ---------------- RATIOS ----------------
# (label prefix, key, category)

RATIO_LABELS = [
    ("gross profit (loss) margin", "gpm", "rasio_usaha"),
    ("net profit (loss)%", "npm", "rasio_usaha"),
    ("roa", "roa", "rasio_usaha"),
    ("roe", "roe", "rasio_usaha"),
    ("cash ratio", "cash_ratio", "rasio_keuangan"),
    ("current ratio", "current_ratio", "rasio_keuangan"),
    ("quick ratio", "quick_ratio", "rasio_keuangan"),
    ("debt ratio", "debt_ratio", "rasio_keuangan"),
    ("cash conversion ratio", "ccr", "rasio_keuangan"),
    ("operating cash flow to asset ratio", "ocf_to_asset", "rasio_keuangan"),
    ("asset turnover ratio", "asset_turnover", "rasio_keuangan"),
    ("inventory turnover ratio", "inventory_turnover", "rasio_keuangan"),
]


# ---------------- OPERATIONAL SHEET ----------------

# tab name -> product name
SKU_SHEETS = {
    "Roove": "Roove",
    "Almona": "Almona",
    "Pluve": "Pluve",
    "YUV": "Yuv",
    "Osgard": "Osgard",
    "Purvu": "Purvu",
    "DRHyun": "Dr Hyun",
    "Globite": "Globite",
    "Orelif": "Orelif",
    "Veminine": "Veminine",
    "Calmara": "Calmara",
    "Other": "Others",
}

# Row order of the net sales and gross profit blocks
CHANNELS = [
    "Facebook Ads",
    "Google Ads",
    "Organik",
    "Reseller",
    "Shopee",
    "TikTok Ads",
    "TikTok Shop",
    "Tokopedia",
    "BliBli",
    "Lazada",
    "SnackVideo Ads",
]

# channel -> row offset inside the admin fee block
MP_ADMIN_CHANNELS = {
    "Shopee": 0,
    "TikTok Shop": 1,
    "BliBli": 2,
    "Lazada": 3,
}

# Row order of the net-after-marketing block (WhatsApp only exists here)
NET_AFTER_MKT_CHANNELS = [
    "Facebook Ads",
    "WhatsApp",
    "Google Ads",
    "Organik",
    "Reseller",
    "Shopee",
    "TikTok Ads",
    "TikTok Shop",
    "Tokopedia",
    "BliBli",
    "Lazada",
    "SnackVideo Ads",
]

# raw channel -> stored channel; anything missing keeps its name
CHANNEL_MERGE = {
    "TikTok Ads": "TikTok",
    "TikTok Shop": "TikTok",
}


# ---------------- PRODUCT KEYWORDS ----------------
# Last resort for product -> brand, checked in order

PRODUCT_KEYWORDS = [
    ("roove", "Roove"),
    ("almona", "Almona"),
    ("pluve", "Pluve"),
    ("purvu", "Purvu"),
    ("the secret", "Purvu"),
    ("arabian", "Purvu"),
    ("mediterranean", "Purvu"),
    ("discovery set", "Purvu"),
    ("drhyun", "DrHyun"),
    ("dr hyun", "DrHyun"),
    ("calmara", "Calmara"),
    ("osgard", "Osgard"),
    ("globite", "Globite"),
    ("orelif", "Orelif"),
    ("verazui", "Verazui"),
    ("clola", "YUV"),
    ("yuv", "YUV"),
    ("veminine", "Veminine"),
    ("prime serum", "Veminine"),
    ("shaker", "Other"),
    ("brosur", "Other"),
    ("jam tangan", "Other"),
    ("baby gold", "Other"),
]

UNKNOWN_PRODUCT = "Unknown"
